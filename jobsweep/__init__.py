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
Jobsweep - a small toolkit for embarrassingly parallel sweeps on clusters.

A sweep over an integer interval is split into many independent jobs. Each
job description is rendered from a template, submitted to a queueing system
and left to run on its own; every worker writes exactly one artifact, named
after its parameter range. Once the sweep is over, the artifacts are merged
into one consolidated dataset.

The main entry points are:

- jobsweep.template.render, to fill in job description templates;
- jobsweep.hpc.submit.JobSubmitter, to hand rendered jobs to a queue;
- jobsweep.worker.Worker, the base class for the units of work;
- jobsweep.collect.collect, to merge the artifacts of a finished sweep.
"""

__version__ = '0.1.0'
