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
Definition of JobSubmitter class

Renders job descriptions from a template and hands them to a queue, one
parameter range at a time, without ever waiting for the jobs to run.
"""

import os
import re
import time
import logging
import tempfile
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from jobsweep.errors import (SubmissionError, SweepPendingError,
                             UnusedBindingError)
from jobsweep.hpc.queues import QueueInterface
from jobsweep.ranges import ParameterRange, split_range
from jobsweep.template import JobTemplate

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*$')
# Placeholders filled in for each job by JobSubmitter.render
AUTO_PLACEHOLDERS = ('LOW', 'HIGH', 'TAG', 'NAME')


class JobDescription(BaseModel):
    """
    A fully rendered job description, ready for submission.
    """

    text: str = Field(..., description="The rendered job file")
    job_name: str = Field(..., description="Unique name of the job")
    prange: ParameterRange = Field(..., description="Range the job covers")

    model_config = ConfigDict(frozen=True)


class JobHandle(BaseModel):
    """
    What is known of a job once the queue has accepted it.
    """

    job_id: str = Field(..., description="ID assigned by the queue")
    job_name: str = Field(..., description="Name of the job")
    prange: ParameterRange = Field(..., description="Range the job covers")
    submitted: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(frozen=True)


class JobSubmitter(object):

    """JobSubmitter object

    Takes a template job file, which can be tagged with placeholders such as
    {{LOW}} and {{HIGH}}; these will be replaced with the appropriate values
    for each job before submission. The following placeholders are bound
    automatically:

    - LOW, HIGH: bounds of the job's parameter range
    - TAG: tag of the sweep
    - NAME: name of the job, <tag>_<low>_<high>

    Any other placeholder needs a value passed through the bindings; the
    automatic ones can not be overridden.

    Each rendered job is written to a temporary file, submitted and then
    deleted. The file name contains the job name, the process ID and a random
    part, so that several processes submitting the same range at the same
    time can never clash. If the submission fails, the file is kept for
    inspection and a SubmissionError is raised.
    """

    def __init__(self, queue, template, tag='sweep', temp_folder=None,
                 cwd=None):
        """Initialize the JobSubmitter object

        | Args:
        |   queue (QueueInterface): object describing the properties of the
        |                           interface to the queue system in use
        |   template (JobTemplate or str): template of the job file
        |   tag (Optional[str]): tag identifying the sweep. It prefixes the
        |                        name of every job, so it must only contain
        |                        letters, digits, '.', '-' and '_'. Default
        |                        is 'sweep'
        |   temp_folder (Optional[str]): where to write the transient job
        |                                files. By default the system's
        |                                temporary directory
        |   cwd (Optional[str]): working directory for the submission
        |                        command. By default the current one

        """

        # Check type
        if not isinstance(queue, QueueInterface):
            raise TypeError('A QueueInterface must be passed to the '
                            'JobSubmitter')
        if not isinstance(template, JobTemplate):
            template = JobTemplate(template)
        if not _TAG_RE.match(tag):
            raise ValueError('Invalid sweep tag {0!r}'.format(tag))

        self.queue = queue
        self.template = template
        self.tag = tag
        self.tmp_dir = (os.path.abspath(temp_folder)
                        if temp_folder is not None else None)
        self.cwd = cwd

    def job_name(self, prange):
        return '{0}_{1:d}_{2:d}'.format(self.tag, prange.low, prange.high)

    def render(self, prange, bindings=None):
        """Render the job description for a parameter range.

        | Args:
        |   prange (ParameterRange): range the job covers
        |   bindings (Optional[dict]): values for any placeholders besides
        |                              the automatic ones. All of them must
        |                              be used by the template
        |
        | Returns:
        |   job (JobDescription): the rendered job
        |
        | Raises:
        |   ValueError: if bindings contain LOW, HIGH, TAG or NAME

        """

        bindings = dict(bindings or {})
        name = self.job_name(prange)

        reserved = set(bindings) & set(AUTO_PLACEHOLDERS)
        if reserved:
            raise ValueError('Placeholder(s) {0} are set automatically and '
                             'can not be bound'.format(
                                 ', '.join(sorted(reserved))))

        unused = set(bindings) - self.template.placeholders
        if unused:
            raise UnusedBindingError(unused)

        values = {'LOW': prange.low, 'HIGH': prange.high,
                  'TAG': self.tag, 'NAME': name}
        values.update(bindings)

        text = self.template.render(values, allow_unused=True)

        return JobDescription(text=text, job_name=name, prange=prange)

    def _write_transient(self, job):
        fd, path = tempfile.mkstemp(prefix='{0}.{1}.'.format(job.job_name,
                                                             os.getpid()),
                                    suffix='.job', dir=self.tmp_dir)
        with os.fdopen(fd, 'w') as f:
            f.write(job.text)
        return path

    def submit(self, job):
        """Submit a rendered job and return immediately.

        | Args:
        |   job (JobDescription): the job to submit
        |
        | Returns:
        |   handle (JobHandle): the job's ID, name and range
        |
        | Raises:
        |   SubmissionError: if the queue could not be reached, could not
        |                    read the job file or did not accept the
        |                    job. The job file is then kept and
        |                    its path stored in the error

        """

        path = self._write_transient(job)
        logger.info('Submitting job {0} to queue'.format(job.job_name))

        try:
            job_id = self.queue.submit(path, name=job.job_name, cwd=self.cwd)
        except (SubmissionError, OSError, UnicodeError) as e:
            logger.error('Submission of job {0} failed, job file kept at '
                         '{1}'.format(job.job_name, path))
            raise SubmissionError(str(e), script_path=path,
                                  stdout=getattr(e, 'stdout', ''),
                                  stderr=getattr(e, 'stderr', ''))

        os.remove(path)
        logger.info('Job {0} submitted with ID {1}'.format(job.job_name,
                                                           job_id))

        return JobHandle(job_id=job_id, job_name=job.job_name,
                         prange=job.prange)

    def submit_range(self, low, high, bindings=None):
        """Render and submit the job for [low, high]"""
        return self.submit(self.render(ParameterRange(low, high), bindings))


def submit_sweep(submitter, low, high, chunk_size=None, bindings=None):
    """Submit one job for each chunk of [low, high].

    All jobs are rendered before the first one is submitted, so that a
    template error does not leave a sweep half submitted. If a submission
    fails, no further job is submitted; the SubmissionError raised carries
    the handles of the jobs already in the queue in its 'submitted'
    attribute.

    | Args:
    |   submitter (JobSubmitter): the submitter to use
    |   low (int): first key of the sweep
    |   high (int): last key of the sweep
    |   chunk_size (Optional[int]): maximum number of keys per job. By
    |                               default the whole sweep is one job
    |   bindings (Optional[dict]): additional template values, the same for
    |                              every job
    |
    | Returns:
    |   handles ([JobHandle]): one handle per submitted job

    """

    jobs = [submitter.render(r, bindings)
            for r in split_range(low, high, chunk_size)]

    logger.info('Submitting sweep {0} over [{1}, {2}]: {3} '
                'jobs'.format(submitter.tag, low, high, len(jobs)))

    handles = []
    for job in jobs:
        try:
            handles.append(submitter.submit(job))
        except SubmissionError as e:
            e.submitted = handles
            logger.error('Sweep {0} interrupted after {1} of {2} '
                         'jobs'.format(submitter.tag, len(handles),
                                       len(jobs)))
            raise

    return handles


def wait_for_sweep(queue, tag, check_time=10, max_time=0):
    """Wait until no job of the sweep tag is left in the queue.

    | Args:
    |   queue (QueueInterface): the queue the sweep was submitted to
    |   tag (str): tag of the sweep
    |   check_time (Optional[float]): time in seconds between consecutive
    |                                 checks of the queue status. Default
    |                                 is 10
    |   max_time (Optional[float]): time in seconds after which to give up.
    |                               If zero, the queue is checked only once.
    |                               Default is 0
    |
    | Raises:
    |   SweepPendingError: if jobs of the sweep are still in the queue when
    |                      max_time has passed

    """

    t0 = time.time()
    while True:
        loop_t0 = time.time()
        jobs = queue.outstanding(tag)
        if len(jobs) == 0:
            logger.info('No jobs of sweep {0} left in the queue'.format(tag))
            return

        if (time.time() - t0) >= max_time:
            raise SweepPendingError(tag, list(jobs.keys()))

        logger.info('{0} jobs of sweep {1} still in the queue'.format(
            len(jobs), tag))
        sleep_time = check_time - (time.time() - loop_t0)
        sleep_time = sleep_time if sleep_time > 0 else 0
        time.sleep(min(sleep_time, max(max_time - (time.time() - t0), 0)))
