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

'''CLI to run a Worker over a parameter range, as done by each job of a
sweep.'''


import os
import sys
import logging

import click
import click_log

from jobsweep.store import DirectoryArtifactStore
from jobsweep.utils import import_module, find_instances
from jobsweep.worker import Worker
from jobsweep.scripts.cli_utils import (add_options, report_errors,
                                        set_verbosity, WORKER_OPTIONS)

# logging
logging.captureWarnings(True)
logger = logging.getLogger('cli')
click_log.basic_config(logger)


def load_worker(worker_file, name=None):
    """Load the Worker instance defined in worker_file. If the file defines
    more than one, name selects which one (by variable name)."""

    # First, check that the required worker file exists and that it
    # contains what we need
    loaded_module = import_module(os.path.abspath(worker_file))
    workers = find_instances(loaded_module, Worker)

    if len(workers) == 0:
        sys.exit('No Worker instance found in '
                 '{0}'.format(worker_file))
    elif len(workers) > 1 and name is None:
        sys.exit('Too many Worker instances found in '
                 '{0}'.format(worker_file))
    elif name is not None and name not in workers:
        sys.exit(('Worker of name {0} '
                  'not found in {1}').format(name, worker_file))
    # We're fine!
    if name is None:
        name = list(workers.keys())[0]

    return workers[name]


@click.command('run-worker')
@click.argument('worker_file',
                type=click.Path(exists=True, dir_okay=False))
@click.argument('low', type=int)
@click.argument('high', type=int)
@add_options(WORKER_OPTIONS)
@report_errors(logger)
def run_worker(
        worker_file,
        low,
        high,
        name=None,
        output_dir=None,
        verbosity=0):
    """
    Run the Worker defined in WORKER_FILE over the keys LOW to HIGH.

    Usage:
    run-worker square.py {{LOW}} {{HIGH}}

    Meant to be called from a job template. Writes exactly one artifact,
    or nothing at all if the worker fails.
    """
    set_verbosity(verbosity)

    worker = load_worker(worker_file, name)
    store = None
    if output_dir is not None:
        store = DirectoryArtifactStore(output_dir, create=True)

    artifact = worker.run(low, high, store=store)
    click.echo('Artifact {0} written'.format(artifact))


if __name__ == '__main__':
    run_worker()
