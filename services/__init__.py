from .cache import CacheStats, ResultCache, content_key, estimate_size
from .performance import OperationTiming, PerformanceMonitor, PerformanceReport
