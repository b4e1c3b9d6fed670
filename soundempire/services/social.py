"""
Player-side social actions and the weekly upkeep of player posts.

Actions (mutate a working copy; raise CareerRejection on invalid input)
-------
create_post(state, text, pinned, rng)       -> Post
like_post(state, post_id)                   -> Post | None   (toggle)
comment_on_post(state, post_id, text)       -> Comment | None

Weekly (called by the advancement engine)
------
refresh_player_posts(state, rng)            -> int  (followers gained)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from soundempire.core.errors import (
    CommentLimitError,
    EmptyTitleError,
    InsufficientResourcesError,
)
from soundempire.core.numbers import round_half_up
from soundempire.schemas.career import (
    AccountCategory,
    CareerState,
    Comment,
    Post,
    SocialState,
)
from soundempire.services.alerts import new_id
from soundempire.services.feed import npc_comments, player_handle
from soundempire.services.rng import RandomSource

POST_ENERGY_COST = 5
PLAYER_POST_LIFETIME_WEEKS = 52
PLAYER_COMMENTS_PER_POST_PER_WEEK = 3
NPC_COMMENTS_ON_NEW_POST = 2
NPC_COMMENTS_PER_POST_PER_WEEK = 2
WEEKLY_LIKE_CAP_RATIO = 0.25
FOLLOWER_GROWTH_PER_POP = (2.0, 6.0)
LIKE_PERCENT = (0.03, 0.10)


@dataclass(frozen=True)
class FollowerTier:
    ceiling: Optional[int]      # exclusive upper bound; None for the top tier
    follower_gain: tuple[int, int]
    views: tuple[int, int]


FOLLOWER_TIERS: list[FollowerTier] = [
    FollowerTier(1_000, (5, 25), (50, 400)),
    FollowerTier(10_000, (20, 120), (300, 3_000)),
    FollowerTier(100_000, (100, 800), (2_000, 25_000)),
    FollowerTier(1_000_000, (500, 5_000), (15_000, 200_000)),
    FollowerTier(None, (2_000, 20_000), (100_000, 1_500_000)),
]


def tier_for(followers: int) -> FollowerTier:
    for tier in FOLLOWER_TIERS:
        if tier.ceiling is None or followers < tier.ceiling:
            return tier
    return FOLLOWER_TIERS[-1]


def _find_post(social: SocialState, post_id: str) -> Optional[Post]:
    return next(
        (p for p in social.posts + social.feed if p.id == post_id),
        None,
    )


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def create_post(state: CareerState, text: str, pinned: bool, rng: RandomSource) -> Post:
    text = (text or "").strip()
    if not text:
        raise EmptyTitleError("post")
    if state.stats.energy < POST_ENERGY_COST:
        raise InsufficientResourcesError(
            "Too tired to post. Rest a bit first.",
            resource="energy", required=POST_ENERGY_COST, available=state.stats.energy,
        )

    player = state.social.player
    handle = player.handle if player else player_handle(state.profile.artist_name)
    followers = player.followers if player else 0
    tier = tier_for(followers)
    week_index = state.clock.index

    views = rng.randint(*tier.views)
    post = Post(
        id=new_id(),
        author=handle,
        category=AccountCategory.player,
        text=text,
        week_index=week_index,
        views=views,
        likes=int(views * rng.uniform(*LIKE_PERCENT)),
        pinned=pinned,
        expires_index=None if pinned else week_index + PLAYER_POST_LIFETIME_WEEKS,
    )
    post.comments = npc_comments(text, week_index, len(state.social.posts), NPC_COMMENTS_ON_NEW_POST)

    if player is not None:
        player.followers += rng.randint(*tier.follower_gain)
    state.stats.energy -= POST_ENERGY_COST
    state.social.posts.insert(0, post)
    return post


def like_post(state: CareerState, post_id: str) -> Optional[Post]:
    post = _find_post(state.social, post_id)
    if post is None:
        return None
    post.liked_by_player = not post.liked_by_player
    post.likes = max(0, post.likes + (1 if post.liked_by_player else -1))
    return post


def comment_on_post(state: CareerState, post_id: str, text: str) -> Optional[Comment]:
    text = (text or "").strip()
    if not text:
        raise EmptyTitleError("comment")
    post = _find_post(state.social, post_id)
    if post is None:
        return None
    if post.player_comments_this_week >= PLAYER_COMMENTS_PER_POST_PER_WEEK:
        raise CommentLimitError(PLAYER_COMMENTS_PER_POST_PER_WEEK)

    player = state.social.player
    comment = Comment(
        id=new_id(),
        author=player.handle if player else player_handle(state.profile.artist_name),
        text=text,
        week_index=state.clock.index,
    )
    post.comments.append(comment)
    post.player_comments_this_week += 1
    return comment


# ---------------------------------------------------------------------------
# Weekly upkeep
# ---------------------------------------------------------------------------

def refresh_player_posts(state: CareerState, rng: RandomSource) -> int:
    """
    Run at the week boundary, after the clock moved. Prunes expired player
    posts, lets live ones keep accruing capped likes and comments, resets
    the per-week comment counters and grows followers. Returns followers gained.
    """
    social = state.social
    now = state.clock.index

    social.posts = [
        p for p in social.posts
        if p.pinned or p.expires_index is None or p.expires_index > now
    ]

    for salt, post in enumerate(social.posts):
        cap = max(1, int(post.likes * WEEKLY_LIKE_CAP_RATIO))
        post.likes += min(cap, rng.randint(0, cap))
        post.views += rng.randint(0, max(1, post.views // 10))
        post.comments.extend(
            npc_comments(post.text, now, salt, rng.randint(0, NPC_COMMENTS_PER_POST_PER_WEEK))
        )
        post.player_comments_this_week = 0

    player = social.player
    if player is None:
        return 0
    gained = round_half_up(state.stats.popularity * rng.uniform(*FOLLOWER_GROWTH_PER_POP))
    player.followers += gained
    return gained
