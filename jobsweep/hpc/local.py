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
Definition of a QueueInterface running jobs on the local machine.
"""

import os
import signal
import logging
import subprocess as sp

from jobsweep.errors import SubmissionError
from jobsweep.hpc.queues import QueueInterface

logger = logging.getLogger(__name__)


class LocalQueueInterface(QueueInterface):

    """LocalQueueInterface object

    A class meant to emulate a QueueInterface on a single machine. Each
    submitted job file is run right away as a separate bash process, in its
    own session, and the call returns without waiting for it. Useful to try
    out a sweep on a laptop, or for testing.

    The job file is read in full at submission time, so it can be deleted
    as soon as submit returns. Jobs are only tracked by the instance that
    submitted them: list() and outstanding() know nothing of jobs started
    by other processes.
    """

    def __init__(self, shell='bash', log_dir=None):
        """Initialize the LocalQueueInterface.

        | Args:
        |   shell (Optional[str]): shell used to run the job files. Default
        |                          is bash
        |   log_dir (Optional[str]): if given, the output and errors of each
        |                            job are saved in <name>.o<id> and
        |                            <name>.e<id> files in this directory.
        |                            By default they are discarded

        """

        self.shell = shell
        self.log_dir = log_dir
        self.name_opt = None
        self.sub_stdin = True

        self._job_list = {}
        self._last_id = 0
        self.returncodes = {}

    @property
    def lists_names(self):
        return True

    def _outfile(self, name, kind, job_id):
        if self.log_dir is None:
            return sp.DEVNULL
        return open(os.path.join(self.log_dir,
                                 '{0}.{1}{2}'.format(name, kind, job_id)),
                    'w')

    def submit(self, script_path, name=None, cwd=None):
        """Start the job file as a background process.

        | Args:
        |   script_path (str): path of the job file to run
        |   name (Optional[str]): name to give to the job
        |   cwd (Optional[str]): path to the desired working directory
        |
        | Returns:
        |   job_id (str): an ID unique within this LocalQueueInterface
        """

        with open(script_path) as f:
            script = f.read()

        self._last_id += 1
        job_id = str(self._last_id)
        name = name if name is not None else job_id

        stdout = self._outfile(name, 'o', job_id)
        stderr = self._outfile(name, 'e', job_id)
        try:
            proc = sp.Popen([self.shell, '-s'], stdin=sp.PIPE,
                            stdout=stdout, stderr=stderr, cwd=cwd,
                            start_new_session=True,
                            universal_newlines=True)
        except OSError as e:
            raise SubmissionError('Could not start {0}: {1}'.format(
                self.shell, e))
        finally:
            for f in (stdout, stderr):
                if f is not sp.DEVNULL:
                    f.close()

        try:
            proc.stdin.write(script)
            proc.stdin.close()
        except BrokenPipeError:
            # The job exited before reading all of its script
            logger.debug('Job {0} closed its input early'.format(job_id))

        self._job_list[job_id] = {'proc': proc, 'name': name}
        logger.debug('Job {0} started with PID {1}'.format(job_id, proc.pid))

        return job_id

    def _update(self):
        for job_id in list(self._job_list.keys()):
            retcode = self._job_list[job_id]['proc'].poll()
            if retcode is not None:
                self.returncodes[job_id] = retcode
                del(self._job_list[job_id])

    def list(self, user=None):
        """List all jobs still running

        | Returns:
        |   jobs (dict): a dict of jobs classified by ID, each with job_id,
        |                job_status and job_name
        |
        """

        self._update()

        jobs = {}
        for job_id, job in self._job_list.items():
            jobs[job_id] = {'job_id': job_id,
                            'job_status': 'r',
                            'job_name': job['name']}

        return jobs

    def kill(self, job_id):
        """Kill the job with the given ID

        | Args:
        |   job_id (str): ID of the job to kill
        |
        """

        try:
            proc = self._job_list[job_id]['proc']
        except KeyError:
            return

        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except ProcessLookupError:
            pass
        proc.wait()
        self._update()

    def wait(self, timeout=None):
        """Block until all jobs have finished. Only meant for testing and
        interactive use; returns the dict of return codes"""

        for job in list(self._job_list.values()):
            job['proc'].wait(timeout=timeout)
        self._update()
        return dict(self.returncodes)
