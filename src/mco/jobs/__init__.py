"""Job models, retry, classification and batch scheduling.

Import submodules directly (mco.jobs.models, mco.jobs.retry,
mco.jobs.scheduler, ...).
"""
