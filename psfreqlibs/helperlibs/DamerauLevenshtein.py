# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Damerau-Levenshtein distance helpers, used for suggesting the closest match for a mistyped name.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from typing import Iterable

def osa_distance(first: str, second: str) -> int:
    """
    Calculate the optimal string alignment distance between two strings: the number of deletions,
    insertions, substitutions and transpositions of adjacent characters needed to turn 'first' into
    'second'.
    """

    prev2: list[int] = []
    prev = list(range(len(second) + 1))

    for fdx in range(1, len(first) + 1):
        cur = [fdx]
        for sdx in range(1, len(second) + 1):
            cost = 0 if first[fdx - 1] == second[sdx - 1] else 1
            dist = min(prev[sdx] + 1, cur[sdx - 1] + 1, prev[sdx - 1] + cost)

            if fdx > 1 and sdx > 1 and first[fdx - 1] == second[sdx - 2] and \
               first[fdx - 2] == second[sdx - 1]:
                dist = min(dist, prev2[sdx - 2] + cost)

            cur.append(dist)

        prev2, prev = prev, cur

    return prev[len(second)]

def closest_match(string: str,
                  strings: Iterable[str],
                  max_distance: int = 2,
                  case_sensitive: bool = False) -> str | None:
    """
    Find the string closest to 'string'.

    Args:
        string: The string to find the closest match for.
        strings: The candidate strings.
        max_distance: The maximum distance a match may have.
        case_sensitive: Ignore the case if False.

    Returns:
        The closest candidate, or 'None' if no candidate is within 'max_distance'.
    """

    candidates = {cand if case_sensitive else cand.lower(): cand for cand in strings}
    if not case_sensitive:
        string = string.lower()

    best_dist = max_distance + 1
    best: str | None = None
    for cand, orig in candidates.items():
        dist = osa_distance(string, cand)
        if dist < best_dist:
            best_dist = dist
            best = orig

    return best
