"""Heuristic detection of job postings that are not written in English"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from gojobs.models.job import JobPosting
from gojobs.utils.string_matcher import KeywordMatcher


# Common words and phrases that appear in job listings, per language.
# Matching is substring based, so short entries such as "voor" also hit
# inside unrelated words. The lists are coarse on purpose.
LANGUAGE_KEYWORDS = {
    "dutch": [
        'wij bieden', 'bruto', 'tussen', 'voor', 'schaal', 'volgens cao', 'vakantie',
        'uitkering', 'vergoeding', 'zorgverzekering', 'secundaire', 'arbeidsvoorwaarden',
        'pensioensregeling', 'welzijn', 'onboardingstraject', 'ontwikkelen', 'plezier',
        'trots', 'diploma', 'kinderopvang', 'bevoegd', 'bijvoorbeeld',
    ],
    "portuguese": [
        'atividades', 'para início imediato', 'assessorando', 'produção', 'liderar',
        'equipe', 'suporte', 'garantir', 'manutenção', 'visando', 'corretiva', 'preventiva',
        'funcionamento', 'equipamentos', 'administrar', 'recursos', 'condições', 'instalações',
        'realizar', 'quando necessário', 'cumprir', 'planos', 'requisitos', 'experiência',
        'segmento', 'residir', 'disponibilidade', 'benefícios',
    ],
    "spanish": [
        'experiencia', 'líder', 'requisitos', 'responsabilidades', 'habilidades',
        'conocimientos', 'buscamos', 'ofrece', 'jornada', 'contrato', 'salario',
        'formación', 'perfil', 'empresa', 'puesto', 'ubicación', 'vacante',
    ],
}

KEYWORD_THRESHOLD = 3

# Title markers, matched case-sensitively against the raw title
PAIRED_TITLE_MARKERS = [("BSO", "Pedagogisch")]
SINGLE_TITLE_MARKERS = ["LÍDER", "LIDER"]


@dataclass
class LanguageReport:
    """
    Outcome of language detection for one posting

    Attributes:
        non_english: Whether the posting is classified as non-English
        reason: Rule that fired ('keywords:<language>', 'title_markers', 'title_marker'),
            or None when the posting is kept
        keyword_counts: Distinct keyword hits per language
    """
    non_english: bool
    reason: Optional[str] = None
    keyword_counts: Dict[str, int] = field(default_factory=dict)


class LanguageFilter:
    """
    Classifies postings as English or non-English by keyword counting

    A posting is non-English when any reference language reaches the keyword
    threshold in its title, description and company text, or when its title
    carries one of the known non-English markers. Postings without a
    description are never flagged because there is nothing to assess.
    """

    def __init__(
        self,
        language_keywords: Optional[Dict[str, List[str]]] = None,
        threshold: int = KEYWORD_THRESHOLD
    ):
        self.logger = logging.getLogger("gojobs.utils.language_filter")
        self.threshold = threshold
        self._matchers = {
            language: KeywordMatcher(keywords)
            for language, keywords in (language_keywords or LANGUAGE_KEYWORDS).items()
        }

    def detect(self, posting: JobPosting) -> LanguageReport:
        """
        Run every detection rule against a posting

        Args:
            posting: Posting to classify

        Returns:
            LanguageReport describing the decision
        """
        if not posting.description or not posting.description.strip():
            return LanguageReport(non_english=False)

        text = " ".join([posting.title or "", posting.description, posting.company or ""]).lower()
        counts = {language: matcher.count_distinct(text) for language, matcher in self._matchers.items()}

        for language, count in counts.items():
            if count >= self.threshold:
                return LanguageReport(True, f"keywords:{language}", counts)

        title = posting.title or ""
        for first, second in PAIRED_TITLE_MARKERS:
            if first in title and second in title:
                return LanguageReport(True, "title_markers", counts)

        if any(marker in title for marker in SINGLE_TITLE_MARKERS):
            return LanguageReport(True, "title_marker", counts)

        return LanguageReport(False, None, counts)

    def is_non_english(self, posting: JobPosting) -> bool:
        """Check whether a posting is likely written in a language other than English"""
        report = self.detect(posting)
        if report.non_english:
            self.logger.debug(f"Flagged non-English posting '{posting.title}' ({report.reason})")
        return report.non_english

    def filter_postings(self, postings: List[JobPosting]) -> List[JobPosting]:
        """
        Remove non-English postings

        Surviving postings keep their relative order and are returned as-is.

        Args:
            postings: Postings to filter

        Returns:
            New list with the English postings
        """
        if not postings:
            return []

        kept = [posting for posting in postings if not self.is_non_english(posting)]

        removed = len(postings) - len(kept)
        if removed > 0:
            self.logger.info(f"Filtered out {removed} non-English job listings")

        return kept
