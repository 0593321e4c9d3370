"""Utility modules for gojobs"""

from gojobs.utils.string_matcher import KeywordMatcher
from gojobs.utils.language_filter import LanguageFilter, LanguageReport
from gojobs.utils.description_formatter import DescriptionBlock, format_description
from gojobs.utils.logger import setup_logger

__all__ = [
    'KeywordMatcher',
    'LanguageFilter',
    'LanguageReport',
    'DescriptionBlock',
    'format_description',
    'setup_logger',
]
