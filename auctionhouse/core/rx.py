"""
Provides reactivex support
"""
import multiprocessing

from reactivex.scheduler import ThreadPoolScheduler

# observers of application event streams are notified on this scheduler, off the asyncio event loop
default_scheduler = ThreadPoolScheduler(multiprocessing.cpu_count())
