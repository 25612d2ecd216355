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
Definition of QueueInterface class.
"""

import os
import re
import shlex
import logging
import subprocess as sp

from jobsweep.errors import SubmissionError
from jobsweep.utils import safe_communicate

logger = logging.getLogger(__name__)

_INT_RE = r'(0|-?[1-9][0-9]*)'


class QueueInterface(object):

    """QueueInterface object

    A class meant to simplify interfacing in a basic way
    with a Queue system. Contains commands to submit job files to the queue,
    list the job IDs, and kill them if necessary. Will contain Regexps to
    parse for IDs and additional information as returned upon submission and
    listing.
    It is important that the regular expressions used employ NAMED GROUPS to
    parse the various fields. In particular, a job_id group must ALWAYS be
    present. A job_name group in list_outre makes it possible to find the
    jobs belonging to a given sweep with outstanding().
    The class also provides some factory methods implementing standard
    interfaces for common queueing systems. These can be retrieved by using
    QueueInterface.<NAME>(). The currently implemented names are the
    following:

    - SLURM (using the command sbatch)
    - LSF (IBM's managing system, using the command bsub)
    - GridEngine (Sun's managing system, also available in an open version,
                  using the command qsub)
    - PBS (another managing system using qsub)

    Note that GridEngine and PBS truncate job names when listing them, and a
    truncated name is no longer recognised by outstanding(), so sweep tags
    should be kept short with those.
    """

    def __init__(self, sub_cmd, list_cmd, kill_cmd, sub_outre, list_outre,
                 list_user_opt=None, name_opt=None, sub_stdin=False):
        """Initialize the QueueInterface.

        | Args:
        |   sub_cmd (str): command used to submit a job file to the queue
        |   list_cmd (str): command used to list all queued jobs for the user
        |   kill_cmd (str): command used to kill a job given its id
        |   sub_outre (str): regular expression used to parse the output of
        |                    sub_cmd. Must contain at least a job_id named
        |                    group
        |   list_outre (str): regular expression used to parse the output of
        |                     list_cmd. Must contain at least a job_id named
        |                     group
        |   list_user_opt (Optional[str]): name of the option for passing a
        |                                  specific user name when listing
        |                                  jobs. For example, on LSF this is
        |                                  -u. By default it's None, and the
        |                                  default of the queueing system is
        |                                  used.
        |   name_opt (Optional[str]): name of the option of sub_cmd setting
        |                             the job name, e.g. -J for SLURM. If
        |                             None, job names are left to the job
        |                             file itself
        |   sub_stdin (Optional[bool]): if True, the job file is passed to
        |                               sub_cmd on its standard input instead
        |                               of as an argument (as LSF's bsub
        |                               requires). Default is False

        """

        self.sub_cmd = sub_cmd
        self.list_cmd = list_cmd
        self.kill_cmd = kill_cmd

        self.sub_outre = re.compile(sub_outre)
        if 'job_id' not in self.sub_outre.groupindex:
            raise ValueError('sub_outre does not contain job_id group')
        self.list_outre = re.compile(list_outre)
        if 'job_id' not in self.list_outre.groupindex:
            raise ValueError('list_outre does not contain job_id group')

        self.list_user_opt = list_user_opt
        self.name_opt = name_opt
        self.sub_stdin = sub_stdin

    @property
    def lists_names(self):
        """Whether listed jobs include their names"""
        return 'job_name' in self.list_outre.groupindex

    def _run(self, cmd, stdin='', cwd=None):
        try:
            subproc = sp.Popen(cmd, stdin=sp.PIPE,
                               stdout=sp.PIPE,
                               stderr=sp.PIPE,
                               cwd=cwd)
        except OSError as e:
            raise SubmissionError('Could not run queue command '
                                  '{0}: {1}'.format(cmd[0], e))
        stdout, stderr = safe_communicate(subproc, stdin)
        return subproc.returncode, stdout, stderr

    def submit(self, script_path, name=None, cwd=None):
        """Submit a job file to the queue.

        | Args:
        |   script_path (str): path of the job file to submit
        |   name (Optional[str]): name to give to the job. Only used if
        |                         name_opt is set
        |   cwd (Optional[str]): path to the desired working directory
        |
        | Returns:
        |   job_id (str): the job ID assigned by the queue system and parsed
        |                 with sub_outre
        """

        cmd = shlex.split(self.sub_cmd)
        if name is not None and self.name_opt is not None:
            cmd += [self.name_opt, name]

        if self.sub_stdin:
            with open(script_path) as f:
                stdin = f.read()
        else:
            cmd += [os.path.abspath(script_path)]
            stdin = ''

        logger.debug('Running {0}'.format(' '.join(cmd)))
        retcode, stdout, stderr = self._run(cmd, stdin, cwd=cwd)

        # Parse out the job id!
        match = self.sub_outre.search(stdout)
        if retcode != 0 or match is None:
            raise SubmissionError('Submission of job has failed with '
                                  'output:\n'
                                  '\tSTDOUT: {0}\n\tSTDERR: {1}'.format(
                                      stdout, stderr),
                                  stdout=stdout, stderr=stderr)
        else:
            return match.groupdict()['job_id']

    def list(self, user=None):
        """List all jobs found in the queue

        | Args:
        |   user (Optional[str]): user for whom jobs should be listed. Will
        |                         not have any effect if list_user_opt has not
        |                         been specified. Default is the current
        |                         user ($USER).
        |
        | Returns:
        |   jobs (dict): a dict of jobs classified by ID containing all info
        |                that can be matched through list_outre

        """

        cmd = shlex.split(self.list_cmd)
        if self.list_user_opt is not None:
            if user is None:
                user = os.environ.get('USER')
            if user:
                cmd += [self.list_user_opt, user]

        # Listing commands often exit with an error when the queue is empty,
        # so the return code is not checked
        _, stdout, stderr = self._run(cmd)

        # Parse out everything!
        jobs = {}
        for line in stdout.split('\n'):
            match = self.list_outre.search(line)
            if match is None:
                continue
            else:
                jobdict = match.groupdict()
                jobs[jobdict['job_id']] = jobdict

        return jobs

    def kill(self, job_id):
        """Kill the job with the given ID

        | Args:
        |   job_id (str): ID of the job to kill
        |
        """

        retcode, stdout, stderr = self._run(shlex.split(self.kill_cmd) +
                                            [job_id])
        if retcode != 0:
            logger.warning('Could not kill job {0}: {1}'.format(job_id,
                                                                stderr))

    def outstanding(self, tag, user=None):
        """Return the jobs still in the queue that belong to the sweep tag,
        that is whose name is <tag>_<low>_<high>

        | Args:
        |   tag (str): tag of the sweep
        |   user (Optional[str]): as in list()
        |
        | Returns:
        |   jobs (dict): as returned by list(), restricted to the sweep

        """

        if not self.lists_names:
            raise ValueError('This queue does not report job names, sweeps '
                             'can not be tracked')

        name_re = re.compile(r'^{0}_{1}_{1}$'.format(re.escape(tag), _INT_RE))

        return {job_id: job for job_id, job in self.list(user=user).items()
                if name_re.match(job.get('job_name') or '')}

    @classmethod
    def SLURM(cls):
        return cls(sub_cmd='sbatch',
                   list_cmd='squeue -h -o "%i %t %j"',
                   kill_cmd='scancel',
                   sub_outre=r'Submitted batch job (?P<job_id>[0-9]+)',
                   list_outre=r'(?P<job_id>[0-9][^\s]*)\s+'
                              r'(?P<job_status>PD|R|CF|CG|S)\s+'
                              r'(?P<job_name>\S+)',
                   list_user_opt='-u',
                   name_opt='-J')

    @classmethod
    def LSF(cls):
        return cls(sub_cmd='bsub',
                   list_cmd='bjobs -noheader -o "jobid stat job_name"',
                   kill_cmd='bkill',
                   sub_outre=r'Job \<(?P<job_id>[0-9]+)\>',
                   list_outre=r'(?P<job_id>[0-9]+)\s+'
                              r'(?P<job_status>RUN|PEND)\s+'
                              r'(?P<job_name>\S+)',
                   list_user_opt='-u',
                   name_opt='-J',
                   sub_stdin=True)

    @classmethod
    def GridEngine(cls):
        return cls(sub_cmd='qsub',
                   list_cmd='qstat',
                   kill_cmd='qdel',
                   sub_outre=r'Your job (?P<job_id>[0-9]+)',
                   list_outre=r'(?P<job_id>[0-9]+)\s+\S+\s+'
                              r'(?P<job_name>\S+)\s+\S+\s+'
                              r'(?P<job_status>r|qw)\s',
                   list_user_opt='-u',
                   name_opt='-N')

    @classmethod
    def PBS(cls):
        return cls(sub_cmd='qsub',
                   list_cmd='qstat',
                   kill_cmd='qdel',
                   sub_outre=r'(?P<job_id>[^\s]+)',
                   list_outre=r'(?P<job_id>[0-9][^\s]*)\s+'
                              r'(?P<job_name>\S+)\s+\S+\s+\S+\s+'
                              r'(?P<job_status>R|Q)\s',
                   list_user_opt='-u',
                   name_opt='-N')
