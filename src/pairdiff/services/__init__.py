from .collector_service import FileSetCollector
from .dispatch_service import DispatchService, compare_directories, iter_pairs
from .report_service import ReportService, ResultSink
from .task_service import run_pair


__all__ = [
    'FileSetCollector',
    'DispatchService',
    'compare_directories',
    'iter_pairs',
    'ReportService',
    'ResultSink',
    'run_pair',
]
