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
Job description templates.

A template is plain text in which placeholders of the form {{NAME}} mark the
spots to fill in, for example a submission script such as

    #!/bin/bash
    #SBATCH --time=01:00:00
    run-worker square.py {{LOW}} {{HIGH}}

Whitespace inside the braces is allowed ({{ LOW }} is the same placeholder
as {{LOW}}). Names must be valid identifiers.

Rendering is strict: every placeholder must receive a value, and by default
every value must be used by some placeholder. All occurrences of each
placeholder are replaced in a single pass, so values containing braces are
never substituted again.
"""

import re
import io

from jobsweep.errors import MissingBindingError, UnusedBindingError

PLACEHOLDER_RE = re.compile(r'\{\{\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*\}\}')


class JobTemplate(object):

    """JobTemplate object

    Holds the text of a job description template along with the names of the
    placeholders found in it.
    """

    def __init__(self, text):
        """Initialize the JobTemplate

        | Args:
        |   text (str): template text, with placeholders in the form {{NAME}}

        """

        if not isinstance(text, str):
            raise TypeError('Template text must be a string')

        self._text = text
        self._placeholders = frozenset(m.group('name') for m in
                                       PLACEHOLDER_RE.finditer(text))

    @classmethod
    def from_file(cls, path):
        """Load a template from a text file"""
        with io.open(path, encoding='utf-8') as f:
            return cls(f.read())

    @property
    def text(self):
        return self._text

    @property
    def placeholders(self):
        """Set of the names of all placeholders in the template"""
        return self._placeholders

    def count(self, name):
        """Number of occurrences of placeholder name in the template"""
        return sum(1 for m in PLACEHOLDER_RE.finditer(self._text)
                   if m.group('name') == name)

    def validate(self, bindings, allow_unused=False):
        """Check that bindings fit the template, raising a
        MissingBindingError or UnusedBindingError if they don't"""

        bound = set(str(k) for k in bindings)

        missing = self._placeholders - bound
        if missing:
            raise MissingBindingError(missing)

        unused = bound - self._placeholders
        if unused and not allow_unused:
            raise UnusedBindingError(unused)

    def render(self, bindings, allow_unused=False):
        """Render the template with the given bindings.

        | Args:
        |   bindings (dict): values for each placeholder, classified by name.
        |                    Values are converted with str()
        |   allow_unused (Optional[bool]): if True, bindings that do not
        |                                  correspond to any placeholder are
        |                                  ignored instead of raising an
        |                                  UnusedBindingError. Default is
        |                                  False
        |
        | Returns:
        |   text (str): the rendered text

        """

        self.validate(bindings, allow_unused=allow_unused)
        values = {str(k): str(v) for k, v in bindings.items()}

        return PLACEHOLDER_RE.sub(lambda m: values[m.group('name')],
                                  self._text)

    def __repr__(self):
        return 'JobTemplate(placeholders={0})'.format(
            sorted(self._placeholders))


def render(template, bindings, allow_unused=False):
    """Render a template (either a JobTemplate or a plain string) with the
    given bindings. See JobTemplate.render for details."""

    if not isinstance(template, JobTemplate):
        template = JobTemplate(template)

    return template.render(bindings, allow_unused=allow_unused)
