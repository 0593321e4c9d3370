"""String matching utilities for scanning job text for keywords"""

import logging
from typing import Iterable, List, Set, Dict
import ahocorasick


class KeywordMatcher:
    """
    Efficient multi-pattern string matching using the Aho-Corasick algorithm

    The automaton is built once for a keyword list and reused for every text
    scanned, so a matcher is meant to be created up front and kept around.
    Matching is plain substring search: a keyword also matches inside a
    longer word.
    """

    def __init__(self, keywords: Iterable[str], case_sensitive: bool = False):
        """
        Build the matcher

        Args:
            keywords: Keywords or phrases to search for
            case_sensitive: Whether matching should be case-sensitive (default: False)
        """
        self.logger = logging.getLogger("gojobs.utils.string_matcher")
        self.case_sensitive = case_sensitive

        normalized = [k if case_sensitive else k.lower() for k in keywords if k]
        # Keep first-seen order while dropping duplicates
        self.keywords: List[str] = list(dict.fromkeys(normalized))

        self._automaton = ahocorasick.Automaton()
        for idx, keyword in enumerate(self.keywords):
            self._automaton.add_word(keyword, (idx, keyword))
        if self.keywords:
            self._automaton.make_automaton()

    def __len__(self) -> int:
        return len(self.keywords)

    def _iter_matches(self, text: str):
        if not self.keywords or not text:
            return
        search_text = text if self.case_sensitive else text.lower()
        for _end_index, (_idx, keyword) in self._automaton.iter(search_text):
            yield keyword

    def found_keywords(self, text: str) -> Set[str]:
        """
        Get the distinct keywords that occur in the text

        Args:
            text: Text to search in (e.g., job description)

        Returns:
            Set of matched keywords (normalized form)

        Example:
            >>> matcher = KeywordMatcher(["bruto", "vakantie", "voor"])
            >>> sorted(matcher.found_keywords("Bruto salaris voor vakantie"))
            ['bruto', 'vakantie', 'voor']
        """
        return set(self._iter_matches(text))

    def count_distinct(self, text: str) -> int:
        """Number of different keywords found in the text"""
        found = self.found_keywords(text)
        self.logger.debug(f"Matched {len(found)}/{len(self.keywords)} keywords")
        return len(found)

    def occurrences(self, text: str) -> Dict[str, int]:
        """
        Get all matched keywords with their occurrence counts

        Example:
            >>> matcher = KeywordMatcher(["go", "docker"])
            >>> matcher.occurrences("Go and Docker. We love Go!")
            {'go': 2, 'docker': 1}
        """
        matches: Dict[str, int] = {}
        for keyword in self._iter_matches(text):
            matches[keyword] = matches.get(keyword, 0) + 1
        return matches

    def matches_any(self, text: str) -> bool:
        """Check whether at least one keyword occurs in the text"""
        for keyword in self._iter_matches(text):
            self.logger.debug(f"Found keyword: {keyword}")
            return True
        return False
