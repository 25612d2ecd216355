#!/usr/bin/env python


import os
import pickle
import sys
import time

# A "mock" queue submission system to test how well QueueInterface works
# Listing command

mydir = os.environ.get("MOCKQUEUE_DIR",
                       os.path.dirname(os.path.realpath(__file__)))
qpath = os.path.join(mydir, "queue.pkl")
try:
    joblist = pickle.load(open(qpath, "rb"))
    if len(joblist) == 0:
        raise OSError
except OSError:
    sys.exit("No unfinished jobs found")

# Check if any jobs are finished and in case remove them
joblist = {job: info for job, info in joblist.items()
           if info["end"] > time.time()}

print("JOBID\tUSER\tSTAT\tQUEUE\tFROM_HOST\tJOB_NAME\tSUBMIT_TIME")
for job in joblist:
    print(
        ("{0}\tusername\tRUN\tqueuename\tnodeURL\t{1}" "\tMM DD HH:MM").format(
            job, joblist[job]["name"]
        )
    )

pickle.dump(joblist, open(qpath, "wb"))
