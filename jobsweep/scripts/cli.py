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

'''Click command line interface for Jobsweep.'''


import click
from jobsweep.scripts import submit_sweep, collect_results, run_worker
import logging
import click_log
# logging
logging.captureWarnings(True)
logger = logging.getLogger(__name__)
click_log.basic_config(logger)

help_text = """
A CLI tool to split a computation into cluster jobs and merge their
results. It has various subcommands, each of which has its own set of
options and help.
"""

@click.group(
    name="jobsweep",
    help=help_text,
    invoke_without_command=True)
@click_log.simple_verbosity_option(logger)
def jobsweep():
    pass

jobsweep.add_command(submit_sweep.submit_sweep)
jobsweep.add_command(collect_results.collect_results)
jobsweep.add_command(run_worker.run_worker)

if __name__ == '__main__':
    jobsweep()
