import logging
from typing import List, Optional, Sequence, Set, Tuple

from release_scraper.models import CandidateGroup, CatalogScene, MatchedGroup, MatchResult
from release_scraper.functions.title_normalizer import normalize_for_comparison, strip_entity_name
from release_scraper.functions.similarity_checks import levenshtein_similarity, is_truncated_match
from release_scraper.functions.logging import log_event

LEVENSHTEIN_THRESHOLD = 0.7
DEFAULT_MATCH_THRESHOLD = 0.7


def _oracle_score(oracle, group_title: str, scene_title: str, entity_name: Optional[str]) -> Optional[float]:
    query = strip_entity_name(group_title, entity_name)
    return oracle.similarity(query, scene_title)


def _structural_match_one(group_title: str, scene_title: str) -> Tuple[Optional[str], float]:
    group_cmp = normalize_for_comparison(group_title)
    scene_cmp = normalize_for_comparison(scene_title)
    if not group_cmp or not scene_cmp:
        return None, 0.0

    score = levenshtein_similarity(group_cmp, scene_cmp)
    if score > LEVENSHTEIN_THRESHOLD:
        return 'levenshtein', score
    if is_truncated_match(group_cmp, scene_cmp):
        return 'truncated', score
    return None, score


def _structural_match(group_title: str, scene_title: str, entity_name: Optional[str]) -> Tuple[Optional[str], float]:
    """Try the group title as is, then with a leading entity name removed."""
    method, score = _structural_match_one(group_title, scene_title)
    stripped = strip_entity_name(group_title, entity_name)
    if method is None and stripped != group_title:
        stripped_method, stripped_score = _structural_match_one(stripped, scene_title)
        if stripped_method is not None or stripped_score > score:
            return stripped_method, stripped_score
    return method, score


def find_scene_for_group(group: CandidateGroup, scenes: Sequence[CatalogScene], claimed: Set[str],
                         oracle=None, match_threshold: float = DEFAULT_MATCH_THRESHOLD,
                         entity_name: Optional[str] = None) -> Tuple[Optional[CatalogScene], str, float]:
    """First unclaimed scene that qualifies, with the rule that matched and its score."""
    use_oracle = oracle is not None and oracle.is_available()
    best_score = 0.0

    for scene in scenes:
        if scene.id in claimed:
            continue

        if use_oracle:
            score = _oracle_score(oracle, group.title, scene.title, entity_name)
            if score is not None and score >= match_threshold:
                return scene, 'ai', score
            if score is not None:
                best_score = max(best_score, score)

        method, score = _structural_match(group.title, scene.title, entity_name)
        if method is not None:
            return scene, method, score
        best_score = max(best_score, score)

    return None, 'none', best_score


def match_groups(groups: List[CandidateGroup], scenes: Sequence[CatalogScene], oracle=None,
                 match_threshold: float = DEFAULT_MATCH_THRESHOLD,
                 entity_name: Optional[str] = None) -> MatchResult:
    """
    Pair candidate groups with known scenes.

    Each scene is claimed by at most one group; groups are processed in order and
    scenes are scanned in catalog order, so the first qualifying pair wins.
    """
    result = MatchResult()
    claimed: Set[str] = set()

    for group in groups:
        scene, method, score = find_scene_for_group(
            group, scenes, claimed, oracle=oracle,
            match_threshold=match_threshold, entity_name=entity_name,
        )

        log_event('match_decision', group_title=group.title, scene_id=scene.id if scene else None,
                  method=method, score=round(score, 4), releases=len(group.releases))

        if scene is None:
            logging.debug(f"No known scene for '{group.title}' (best score {score:.2f})")
            result.unmatched.append(group)
            continue

        claimed.add(scene.id)
        logging.debug(f"Matched '{group.title}' to scene {scene.id} '{scene.title}' via {method} ({score:.2f})")
        result.matched.append(MatchedGroup(scene=scene, group=group, method=method, score=score))

    logging.info(f"Matched {len(result.matched)} of {len(groups)} groups against {len(scenes)} known scenes")
    return result
