#!/usr/bin/env python
"""
Jobsweep - split, submit and merge cluster parameter sweeps
"""

from setuptools import setup, find_packages
from jobsweep import __version__

long_description = """
Jobsweep is a Python library to run embarrassingly parallel computations on
queue-based compute clusters. A computation over an integer parameter range
is split into independent jobs, rendered from a job file template and
submitted to the queue (SLURM, LSF, GridEngine, PBS or a local stand-in)
without waiting for them. Each job runs a worker that writes exactly one
artifact named after its range; once the sweep is over, the artifacts are
merged into one consolidated dataset, with overlapping or missing keys
reported rather than silently accepted."""

if __name__ == '__main__':

    setup(name='Jobsweep',
          version=__version__,
          description='Split, submit and merge cluster parameter sweeps',
          long_description=long_description,
          license='LGPL',
          classifiers=[
              # How mature is this project? Common values are
              #   3 - Alpha
              #   4 - Beta
              #   5 - Production/Stable
              'Development Status :: 3 - Alpha',

              # Indicate who your project is intended for
              'Intended Audience :: Science/Research',
              'Topic :: Scientific/Engineering',
              'Topic :: System :: Distributed Computing',

              # Pick your license as you wish (should match "license" above)
              'License :: OSI Approved :: GNU Library or Lesser General Public'
              ' License (LGPL)',

              'Programming Language :: Python :: 3',
          ],
          keywords=['hpc', 'cluster', 'batch jobs', 'parameter sweep'],
          packages=find_packages(exclude=['tests', 'tests.*']),
          entry_points={
              'console_scripts': ['jobsweep = '
                                  'jobsweep.scripts.cli:jobsweep',
                                  'submit-sweep = '
                                  'jobsweep.scripts.submit_sweep:submit_sweep',
                                  'collect-results = '
                                  'jobsweep.scripts.collect_results:'
                                  'collect_results',
                                  'run-worker = '
                                  'jobsweep.scripts.run_worker:run_worker']
          },
          # Requirements
          install_requires=[
              'numpy',
              'pandas',
              'pydantic>=2',
              'click',
              'click_log',
          ],
          extras_require={
              'test': ['pytest'],
          },
          python_requires='>=3.8'
          )
