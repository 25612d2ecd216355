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

'''A collection of functions and options for the command line interface for
jobsweep.'''


import os
import re
import sys
import logging
from configparser import ConfigParser
from functools import wraps

import click
import click_log

from jobsweep.errors import JobsweepError
from jobsweep.hpc import QUEUES
from jobsweep.collect import OUTPUT_FORMATS
from jobsweep.ranges import ARTIFACT_FORMATS


# join home and config file
home = os.path.expanduser('~')
# get default jobsweep config file:
DEFAULT_CFG = os.environ.get('JOBSWEEP_CONFIG',
                             os.path.join(home, '.jobsweep', 'config.ini'))

# Messages from the library go through click as well
click_log.basic_config(logging.getLogger('jobsweep'))


#callback to load config file
def configure(ctx, param, filename):
    """Read option defaults for the current command from an INI file.

    Options in the [jobsweep] section apply to every command, those in a
    [jobsweep.<command>] section (e.g. [jobsweep.submit-sweep]) only to that
    command. Option names can be written with dashes or underscores.
    """
    cfg = ConfigParser()
    cfg.read(filename)
    defaults = dict(ctx.default_map or {})
    for sect in ('jobsweep', 'jobsweep.{0}'.format(ctx.info_name)):
        if cfg.has_section(sect):
            for k, v in cfg[sect].items():
                defaults[k.replace('-', '_')] = v
    ctx.default_map = defaults


### PARSER HELPERS ###
def bindings_parser(ctx, parameter, value):
    """Parse template bindings given as KEY=VALUE pairs.
    Args:
        ctx: click context
        parameter: click parameter
        value (tuple): the pairs, as passed with e.g. ``-b DATA=input.csv``.
    Returns:
        dict: The value for each placeholder. Formatted as::
            {KEY: VALUE}.
    """

    bindings = {}
    for pair in value or ():
        match = re.match(r'^\s*([A-Za-z_][A-Za-z0-9_]*)\s*[=:](.*)$', pair)
        if match is None:
            raise click.BadParameter("Bindings must be of the form KEY=VALUE,"
                                     " got '{0}'".format(pair))
        bindings[match.group(1)] = match.group(2)
    return bindings


### CLI OPTIONS ###
config = click.option(
    '-c', '--config',
    type         = click.Path(dir_okay=False),
    default      = DEFAULT_CFG,
    callback     = configure,
    is_eager     = True,
    expose_value = False,
    show_default = True,
    help         = 'Read option defaults from the specified INI file. '
                    'If not set, first checks environment variable: '
                    '``JOBSWEEP_CONFIG`` and then ``~/.jobsweep/config.ini``',
)
# verbosity flag e.g. -v -vv
verbosity = click.option('--verbosity',
            '-v',
            count=True,
            help="Increase verbosity. "
            "Use -v for info, -vv for debug. Defaults to only showing warnings and errors.")
queue = click.option('--queue',
            '-q',
            type=click.Choice(sorted(QUEUES)),
            default='slurm',
            show_default=True,
            help="Queueing system the jobs are submitted to.")
tag = click.option('--tag',
            type=str,
            default='sweep',
            show_default=True,
            help="Tag identifying the sweep. Every job is named "
            "``<tag>_<low>_<high>``.")

## submission options
template = click.option('--template',
            '-t',
            type=click.Path(exists=True, dir_okay=False),
            required=True,
            help="Job file template. Placeholders are written as ``{{NAME}}``; "
            "``{{LOW}}``, ``{{HIGH}}``, ``{{TAG}}`` and ``{{NAME}}`` are filled in "
            "automatically.")
chunk_size = click.option('--chunk-size',
            '-n',
            type=click.IntRange(min=1),
            default=None,
            help="Split the range in jobs of at most this many keys. "
            "Defaults to a single job for the whole range.")
bindings = click.option('--bind',
            '-b',
            'bindings',
            multiple=True,
            callback=bindings_parser,
            help="Value for an additional template placeholder, as ``KEY=VALUE``. "
            "Can be used multiple times: ``-b DATA=input.csv -b MEM=4G``.")
temp_folder = click.option('--temp-folder',
            type=click.Path(file_okay=False),
            default=None,
            help="Where to write the transient job files. "
            "Defaults to the system's temporary directory.")
dry_run = click.option('--dry-run',
            is_flag=True,
            default=False,
            help="Print the rendered job files instead of submitting them.")

## collection options
prefix = click.option('--prefix',
            '-p',
            type=str,
            default='result',
            show_default=True,
            help="Prefix of the artifact names, ``<prefix>_<low>_<high>.<ext>``.")
ext = click.option('--ext',
            type=click.Choice(ARTIFACT_FORMATS),
            default='.csv',
            show_default=True,
            help="Extension (and format) of the artifacts.")
key = click.option('--key',
            '-k',
            type=str,
            default='K',
            show_default=True,
            help="Name of the key column.")
df_output = click.option('--output',
            '-o',
            type=click.Path(dir_okay=False),
            default=None,
            help="Output file name. Defaults to ``consolidated.csv`` "
            "in the artifact directory. If the output file name has a recognised "
            "extension (see ``--output-format`` for allowed values), the format "
            "is guessed from that.")
df_output_format = click.option('--output-format',
            '-f',
            type=click.Choice(OUTPUT_FORMATS),
            default=None,
            help="Output file format. "
            "If not specified, the format is guessed from output filename extension. "
            "The ``txt``, ``tsv`` and ``dat`` formats all produce tab separated files.")
expected = click.option('--expected',
            type=int,
            nargs=2,
            default=None,
            metavar='LOW HIGH',
            help="Full range the sweep should cover. If given, any missing key "
            "is reported as an error.")
allow_duplicates = click.option('--allow-duplicates',
            is_flag=True,
            default=False,
            help="Tolerate keys present in more than one artifact, keeping the "
            "one from the artifact with the highest range.")
cleanup = click.option('--cleanup',
            is_flag=True,
            default=False,
            help="Delete the merged artifacts once the consolidated "
            "dataset has been written.")
gate_tag = click.option('--tag',
            type=str,
            default=None,
            help="Tag of the sweep. If given, the queue is checked first and "
            "nothing is collected while jobs of the sweep are still listed.")
wait = click.option('--wait',
            type=click.FloatRange(min=0),
            default=0,
            show_default=True,
            help="With ``--tag``, how many seconds to keep waiting for the "
            "sweep's jobs to leave the queue.")
check_time = click.option('--check-time',
            type=click.FloatRange(min=0),
            default=10,
            show_default=True,
            help="With ``--wait``, seconds between checks of the queue.")

## worker options
worker_name = click.option('-n',
            'name',
            type=str,
            default=None,
            help="Name of the Worker instance to use, if "
            "more than one is present in the given file. "
            "CAREFUL: this is the name of the variable, not the "
            "one passed as parameter in the constructor.")
output_dir = click.option('--output-dir',
            type=click.Path(file_okay=False),
            default=None,
            help="Directory the artifact is written into. "
            "Defaults to the Worker's own output_dir.")


COMMON_OPTIONS = [config, verbosity]
SUBMIT_OPTIONS = COMMON_OPTIONS + [template, queue, tag, chunk_size, bindings,
                                   temp_folder, dry_run]
COLLECT_OPTIONS = COMMON_OPTIONS + [prefix, ext, key, df_output,
                                    df_output_format, expected,
                                    allow_duplicates, cleanup, gate_tag, queue,
                                    wait, check_time]
WORKER_OPTIONS = COMMON_OPTIONS + [worker_name, output_dir]


# function to add options to a subcommand
def add_options(options):
    def _add_options(func):
        for option in reversed(options):
            func = option(func)
        return func
    return _add_options


### FUNCTIONS ###
def set_verbosity(verbosity):
    """Set the logging level from the number of -v flags"""
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.getLogger('jobsweep').setLevel(level)
    logging.getLogger('cli').setLevel(level)


def report_errors(logger):
    """Decorator for commands: log any JobsweepError and exit with its
    exit code"""

    def decorator(func):

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except JobsweepError as e:
                logger.error('{0}: {1}'.format(type(e).__name__, e))
                sys.exit(e.exit_code)
            except ValueError as e:
                # Invalid tags, prefixes, ranges etc.
                raise click.UsageError(str(e))

        return wrapper

    return decorator
