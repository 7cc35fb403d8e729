"""
Data module - corpus records, NDJSON loading and the category index.
"""

from .records import TrainingRecord
from .loaders import BaseLoader, NdjsonLoader, create_loader, iter_records, parse_record
from .corpus import (
    CategoryIndex,
    CorpusScan,
    DocumentCollector,
    RecordSubscriber,
    scan_corpus,
    stream_records
)

__all__ = [
    'TrainingRecord',
    'BaseLoader',
    'NdjsonLoader',
    'create_loader',
    'iter_records',
    'parse_record',
    'CategoryIndex',
    'CorpusScan',
    'DocumentCollector',
    'RecordSubscriber',
    'scan_corpus',
    'stream_records'
]
