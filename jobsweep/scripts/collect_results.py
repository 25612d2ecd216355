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

'''CLI to merge the artifacts of a finished sweep into one consolidated
dataset.'''


import os
import logging

import click
import click_log

from jobsweep.collect import ResultCollector, DEFAULT_OUTPUT
from jobsweep.hpc import get_queue, wait_for_sweep
from jobsweep.ranges import ArtifactNaming
from jobsweep.store import DirectoryArtifactStore
from jobsweep.scripts.cli_utils import (add_options, report_errors,
                                        set_verbosity, COLLECT_OPTIONS)

# logging
logging.captureWarnings(True)
logger = logging.getLogger('cli')
click_log.basic_config(logger)


@click.command('collect-results')
@click.argument('directory',
               type=click.Path(exists=True, file_okay=False))
@add_options(COLLECT_OPTIONS)
@report_errors(logger)
def collect_results(
        directory,
        prefix='result',
        ext='.csv',
        key='K',
        output=None,
        output_format=None,
        expected=None,
        allow_duplicates=False,
        cleanup=False,
        tag=None,
        queue='slurm',
        wait=0,
        check_time=10,
        verbosity=0):
    """
    Merge the artifacts found in DIRECTORY into one dataset.

    Usage:
    collect-results results/ --expected 1 1000

    All files named <prefix>_<low>_<high>.<ext> are loaded, their rows
    concatenated and sorted by key, and the result written to
    DIRECTORY/consolidated.csv (or to the file given with --output).

    Exit codes: 5 no artifacts found, 6 duplicate keys, 7 incomplete sweep,
    8 unreadable artifact, 9 sweep still in the queue.
    """
    set_verbosity(verbosity)

    if tag is not None:
        wait_for_sweep(get_queue(queue), tag, check_time=check_time,
                       max_time=wait)

    if output is None:
        output = os.path.join(directory, DEFAULT_OUTPUT)
    if expected is not None and len(expected) == 0:
        expected = None

    collector = ResultCollector(DirectoryArtifactStore(directory),
                                naming=ArtifactNaming(prefix=prefix, ext=ext),
                                key=key,
                                allow_duplicates=allow_duplicates)
    n_artifacts = len(collector.find_artifacts())
    dataset = collector.run(output, expected=expected,
                            output_format=output_format, cleanup=cleanup)

    click.echo('Merged {0} rows from {1} artifacts into {2}'.format(
        len(dataset), n_artifacts, output))


if __name__ == '__main__':
    collect_results()
