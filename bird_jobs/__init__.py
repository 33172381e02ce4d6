"""
Bird Jobs

Accepts bird names as jobs, looks each one up on Wikipedia from a pool of
polling workers, and exposes the resulting extract once the job is done.
"""

__version__ = "1.0.0"
