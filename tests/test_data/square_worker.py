"""A Worker computing a couple of powers of each key, used by the tests"""

from jobsweep.worker import Worker


class PowerWorker(Worker):

    def compute(self, key, data):
        return {'square': float(key**2), 'cube': float(key**3)}


square = PowerWorker(name='result')
