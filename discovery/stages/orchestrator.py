"""
Pipeline orchestrator: rank the candidate pool, select one candidate by
wildness, and explain the pick.

The main entry point is create_discovery. It expects a pool already built by
the candidate pool stage and a ScoringContext with batched signals joined in.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from discovery.errors import EmptyPoolError
from discovery.models.config import DiscoveryConfig, resolve_config
from discovery.models.content import Content
from discovery.models.pool import CandidatePool
from discovery.models.preferences import clamp_wildness
from discovery.models.scoring import DiscoveryResult, ScoringContext
from discovery.stages.candidate_pool import filter_candidates
from discovery.stages.ranking import build_rationale, rank_candidates, trending_window_for
from discovery.stages.selection import select_candidate

logger = logging.getLogger(__name__)


def _eligible(
    pool: CandidatePool,
    excluded_ids: Optional[Iterable[str]],
    context: ScoringContext,
) -> List[Content]:
    """Final exclusion pass; the pool stage already filtered, this keeps the guarantee local."""
    if excluded_ids is None:
        return list(pool.candidates)
    return filter_candidates(
        pool.candidates, set(excluded_ids), context.preferences.blocked_domains
    )


def create_discovery(
    pool: CandidatePool,
    context: ScoringContext,
    wildness=None,
    excluded_ids: Optional[Iterable[str]] = None,
    config: Optional[DiscoveryConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> DiscoveryResult:
    """
    Rank, select, and explain one discovery.

    wildness: request override; falls back to the stored preference. Clamped to [0, 100].
    Raises EmptyPoolError when nothing is left to serve.
    """
    config = resolve_config(config)
    w = clamp_wildness(context.preferences.wildness if wildness is None else wildness)

    candidates = _eligible(pool, excluded_ids, context)
    ranked = rank_candidates(candidates, context, config)
    if not ranked:
        raise EmptyPoolError(
            context.preferences.user_id, pool.exclusion_count, pool.fetch_attempts
        )

    selection = select_candidate(ranked, w, context.affinity, config, rng)
    chosen = selection.candidate
    window = trending_window_for(chosen.content.id, context.trending)
    rationale = build_rationale(chosen, explored=selection.explored, trending_window=window)

    logger.info(
        "[discovery] SELECTED user_id=%s content_id=%s rank=%s band=%s explored=%s pool=%s",
        context.preferences.user_id, chosen.content.id, selection.rank,
        selection.band, selection.explored, len(ranked),
    )
    return DiscoveryResult(
        content=chosen.content,
        rationale=rationale,
        score=chosen.final_score,
        rank=selection.rank,
        explored=selection.explored,
        band=selection.band,
        wildness=w,
        pool_size=len(ranked),
        warnings=list(pool.warnings),
    )
