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

'''CLI to render a job template over a parameter range and submit the
resulting job(s) to a queue.'''


import logging

import click
import click_log

from jobsweep.hpc import JobSubmitter, get_queue, submit_sweep as _submit
from jobsweep.ranges import split_range
from jobsweep.template import JobTemplate
from jobsweep.scripts.cli_utils import (add_options, report_errors,
                                        set_verbosity, SUBMIT_OPTIONS)

# logging
logging.captureWarnings(True)
logger = logging.getLogger('cli')
click_log.basic_config(logger)


@click.command('submit-sweep')
@click.argument('low', type=int)
@click.argument('high', type=int)
@add_options(SUBMIT_OPTIONS)
@report_errors(logger)
def submit_sweep(
        low,
        high,
        template,
        queue='slurm',
        tag='sweep',
        chunk_size=None,
        bindings=None,
        temp_folder=None,
        dry_run=False,
        verbosity=0):
    """
    Submit the jobs of a sweep over the keys LOW to HIGH (both included).

    Usage:
    submit-sweep -t job.sh 1 1000 -n 100

    The template is rendered once per job, with {{LOW}} and {{HIGH}} set to
    the job's range, and each rendered job file is handed to the queue. The
    command returns as soon as the queue has accepted the jobs.
    """
    set_verbosity(verbosity)

    if low > high:
        raise click.BadParameter('LOW ({0}) must not be greater than HIGH '
                                 '({1})'.format(low, high))

    jtemplate = JobTemplate.from_file(template)

    if dry_run:
        # Render only, against a submitter that will never be used
        submitter = JobSubmitter(get_queue('local'), jtemplate, tag=tag)
        for prange in split_range(low, high, chunk_size):
            job = submitter.render(prange, bindings)
            click.echo('### {0}'.format(job.job_name))
            click.echo(job.text)
        return

    submitter = JobSubmitter(get_queue(queue), jtemplate, tag=tag,
                             temp_folder=temp_folder)
    handles = _submit(submitter, low, high, chunk_size=chunk_size,
                      bindings=bindings)

    for h in handles:
        click.echo('Submitted job {0} ({1}, keys {2})'.format(h.job_id,
                                                              h.job_name,
                                                              h.prange))


if __name__ == '__main__':
    submit_sweep()
