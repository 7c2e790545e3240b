import os

# Workload scale used by the tests, to keep runs short
try:
    SCALE = float(os.getenv("SAMPLETRACE_TESTS_SCALE", "0.05"))
except ValueError:
    SCALE = 0.05

# Sampling interval used by the tests, in microseconds
INTERVAL = 1000
