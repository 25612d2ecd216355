#!/usr/bin/env python


import os
import pickle
import sys
import time

import numpy as np

# A "mock" queue submission system to test how well QueueInterface works
# Submission command: mocksub.py [-J name] <job file>
# The job file may contain the lines
#   #MOCK <seconds>   how long the job stays in the queue
#   #MOCK REJECT      refuse the job

mydir = os.environ.get("MOCKQUEUE_DIR",
                       os.path.dirname(os.path.realpath(__file__)))
qpath = os.path.join(mydir, "queue.pkl")

args = sys.argv[1:]
jobname = "job"
if "-J" in args:
    i = args.index("-J")
    jobname = args[i + 1]
    del args[i:i + 2]

try:
    script = open(args[-1]).read()
except (IndexError, OSError):
    sys.exit("No job file given")

joblength = 60.0
for line in script.split("\n"):
    if line.startswith("#MOCK"):
        val = line.split()[1]
        if val == "REJECT":
            sys.exit("Job rejected: invalid job file")
        joblength = float(val)

try:
    joblist = pickle.load(open(qpath, "rb"))
except OSError:
    joblist = {}

rnd_id = str(np.random.randint(100000, 999999))
while rnd_id in joblist:
    rnd_id = str(np.random.randint(100000, 999999))
joblist[rnd_id] = {"name": jobname, "end": time.time() + joblength}

print(f"Job <{rnd_id}> is submitted to default queue")

pickle.dump(joblist, open(qpath, "wb"))
