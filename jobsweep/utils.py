# Jobsweep - split, submit and merge cluster parameter sweeps
# Copyright (C) 2026 - The Jobsweep developers

# Jobsweep is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# Jobsweep is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.

# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""
utils.py

Contains package-wide useful routines that don't fall under any specific
category: subprocess handling, loading user modules from file paths and
the like.
"""

import os
import importlib.util


def seedname(path):
    """Get the filename (with no extension) from a full path"""
    return os.path.splitext(os.path.basename(path))[0]


def safe_communicate(subproc, stdin=''):
    """Executes a Popen.communicate and returns output keeping input and
    output as strings, whether the process was opened in text mode or
    not"""
    if not subproc.universal_newlines:
        stdin = stdin.encode('utf-8') if hasattr(stdin, 'encode') else stdin
    stdout, stderr = map(lambda x: x.decode() if hasattr(x, 'decode') else x,
                         subproc.communicate(stdin))

    return stdout or '', stderr or ''


def import_module(mpath):
    """Import a Python module from its file path.

    | Args:
    |   mpath (str): path to the .py file
    |
    | Returns:
    |   module (module): the loaded module

    """

    if not os.path.isfile(mpath):
        raise ImportError('Could not import file ' + mpath)

    spec = importlib.util.spec_from_file_location(seedname(mpath), mpath)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def find_instances(module, cls):
    """Return a dict of all the module-level variables of module that are
    instances of cls, classified by variable name"""
    return {v: getattr(module, v) for v in dir(module)
            if v[:2] != '__' and isinstance(getattr(module, v), cls)}
