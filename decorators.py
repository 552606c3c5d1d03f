"""
decorators.py

Copyright 2024 Eduardo Horta Santos <GitHub: Eduardo-HortaS>

This program is free software; you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation; either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program; if not, write to the Free Software
Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
MA 02110-1301, USA.

Wrappers used by select_records.py to report how long the GFF3 read pass
took and, with --profile, how much memory the accumulated records needed.

"""

import time
import logging
import functools
from typing import Callable, Any
import memory_profiler

def measure_time(func: Callable[..., Any], logger: logging.Logger):
    """
    Measures the time it took to execute the wrapped function.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        execution_time = time.perf_counter() - start_time
        logger.info("SELECT_RECORDS --- TIMING --- %s execution time: %.6f seconds",
                    func.__name__, execution_time)
        return result
    return wrapper

def measure_time_and_memory(func: Callable[..., Any], logger: logging.Logger):
    """
    Measures both execution time and memory usage increase of the wrapped function.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        memory_before = memory_profiler.memory_usage()[0]
        result = func(*args, **kwargs)
        memory_after = memory_profiler.memory_usage()[0]
        execution_time = time.perf_counter() - start_time
        logger.info("SELECT_RECORDS --- PROFILE --- %s execution time: %.6f seconds",
                    func.__name__, execution_time)
        logger.info("SELECT_RECORDS --- PROFILE --- Memory increase for %s: %.2f MB",
                    func.__name__, memory_after - memory_before)
        return result
    return wrapper
