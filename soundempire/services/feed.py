"""
Social Feed Generator: the weekly stream of posts around the player.

Public API
----------
seed_accounts(social, artist_name)            -> None   (idempotent)
generate_feed(state, processed, rng, events)  -> list[Post]
npc_comments(text, week_index, salt, count)   -> list[Comment]

Feed shape
----------
Five author categories, each with its own post-count range (8-12 total):

  official_chart   1    data-driven chart recap (top single / project, debuts)
  official_stats   1-2  player stat summaries
  industry         2-3  generic industry news + this week's engagements
  trending         1-2  hashtags
  npc              3-4  fan chatter from a rotating subset of a fixed roster

Views come from a per-category range; likes are 2-8% of views.

NPC comments are picked by keyword match against the post text (falling back
to generic enthusiasm) and rotated by week index, so the same post text in a
different week gets different comments. No randomness is used for comments.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from soundempire.schemas.career import (
    AccountCategory,
    CareerClock,
    CareerState,
    Comment,
    Post,
    Project,
    SocialAccount,
    SocialState,
    Single,
)
from soundempire.services.alerts import new_id
from soundempire.services.rng import RandomSource

# Stamped on every generated post for clients. advance_week replaces the whole
# feed each week, so nothing prunes by it; a post is gone before it expires.
FEED_POST_LIFETIME_WEEKS = 2

FEED_COUNTS: dict[AccountCategory, tuple[int, int]] = {
    AccountCategory.official_chart: (1, 1),
    AccountCategory.official_stats: (1, 2),
    AccountCategory.industry: (2, 3),
    AccountCategory.trending: (1, 2),
    AccountCategory.npc: (3, 4),
}

VIEW_RANGES: dict[AccountCategory, tuple[int, int]] = {
    AccountCategory.official_chart: (20_000, 80_000),
    AccountCategory.official_stats: (20_000, 80_000),
    AccountCategory.industry: (5_000, 30_000),
    AccountCategory.trending: (10_000, 60_000),
    AccountCategory.npc: (500, 8_000),
}

LIKE_RATIO = (0.02, 0.08)

FEED_COMMENTS_PER_POST = 2


# ---------------------------------------------------------------------------
# Fixed accounts
# ---------------------------------------------------------------------------

CHART_HANDLE = "@chartpulse"
STATS_HANDLE = "@streamtracker"
INDUSTRY_HANDLE = "@industrybuzz"
TRENDING_HANDLE = "@trendingnow"

FIXED_ACCOUNTS: list[SocialAccount] = [
    SocialAccount(handle=CHART_HANDLE, display_name="Chart Pulse",
                  category=AccountCategory.official_chart, followers=2_400_000, verified=True),
    SocialAccount(handle=STATS_HANDLE, display_name="Stream Tracker",
                  category=AccountCategory.official_stats, followers=1_100_000, verified=True),
    SocialAccount(handle=INDUSTRY_HANDLE, display_name="Industry Buzz",
                  category=AccountCategory.industry, followers=850_000, verified=True),
    SocialAccount(handle=TRENDING_HANDLE, display_name="Trending Now",
                  category=AccountCategory.trending, followers=3_200_000, verified=True),
]

NPC_ROSTER: list[SocialAccount] = [
    SocialAccount(handle="@melodymae", display_name="Melody Mae",
                  category=AccountCategory.npc, followers=12_400),
    SocialAccount(handle="@beatsbyjax", display_name="Jax",
                  category=AccountCategory.npc, followers=8_900),
    SocialAccount(handle="@vinylvera", display_name="Vera Spins",
                  category=AccountCategory.npc, followers=31_000),
    SocialAccount(handle="@basslinebo", display_name="Bo",
                  category=AccountCategory.npc, followers=2_300),
    SocialAccount(handle="@lofi_lena", display_name="Lena",
                  category=AccountCategory.npc, followers=15_700),
    SocialAccount(handle="@synthsam", display_name="Synth Sam",
                  category=AccountCategory.npc, followers=640),
    SocialAccount(handle="@hooksandhearts", display_name="Hooks & Hearts",
                  category=AccountCategory.npc, followers=22_100),
    SocialAccount(handle="@nightdrivenico", display_name="Nico",
                  category=AccountCategory.npc, followers=4_800),
]


def player_handle(artist_name: str) -> str:
    slug = re.sub(r"[^a-z0-9_]", "", artist_name.lower().replace(" ", "_"))
    return f"@{slug or 'artist'}"


def seed_accounts(social: SocialState, artist_name: str) -> None:
    """Add the player, official and NPC accounts that are missing. Never duplicates."""
    if social.player is None:
        social.accounts.insert(0, SocialAccount(
            handle=player_handle(artist_name),
            display_name=artist_name,
            category=AccountCategory.player,
        ))
    for fixed in FIXED_ACCOUNTS + NPC_ROSTER:
        if social.account(fixed.handle) is None:
            social.accounts.append(fixed.model_copy())


# ---------------------------------------------------------------------------
# Comment templates
# ---------------------------------------------------------------------------

# (keywords, templates); first matching group wins
COMMENT_TEMPLATES: list[tuple[tuple[str, ...], list[str]]] = [
    (("tour", "gig", "show", "concert", "festival", "arena", "club"), [
        "Need tour dates in my city ASAP",
        "That live set must have been unreal",
        "Saving up for the next show already",
        "The energy at these shows is unmatched",
    ]),
    (("album", "ep", "project", "tracklist"), [
        "Front to back, no skips",
        "The tracklist on this is crazy",
        "Been waiting for a full project forever",
        "Track 3 is going to be everyone's favorite",
    ]),
    (("chart", "streams", "#1", "debut", "units"), [
        "Those numbers are climbing fast",
        "Charts don't lie, this is a moment",
        "Streaming this on repeat to help the numbers",
        "Called it weeks ago, this was always a hit",
    ]),
    (("single", "song", "track", "release", "dropped", "new music"), [
        "This song has been stuck in my head all week",
        "Instant add to my playlist",
        "The production on this is so clean",
        "Play this at my wedding honestly",
    ]),
    (("interview", "podcast", "radio", "tv"), [
        "Loved hearing the story behind the music",
        "Such a genuine interview",
        "Clip this and post it everywhere",
        "Finally some real talk about the industry",
    ]),
]

GENERIC_COMMENTS = [
    "Love this!",
    "Big things coming",
    "Always here for this",
    "Underrated and it's not close",
    "Keep going, we see you",
    "This made my day",
]


def comment_candidates(text: str) -> list[str]:
    lowered = text.lower()
    for keywords, templates in COMMENT_TEMPLATES:
        if any(re.search(rf"(?<!\w){re.escape(k)}(?!\w)", lowered) for k in keywords):
            return templates
    return GENERIC_COMMENTS


def npc_comments(
    text: str,
    week_index: int,
    salt: int,
    count: int,
    exclude: Optional[str] = None,
) -> list[Comment]:
    """
    Deterministic NPC comments for a post. `salt` separates posts within one
    week; `week_index` rotates the pick from week to week.
    """
    candidates = comment_candidates(text)
    commenters = [a.handle for a in NPC_ROSTER if a.handle != exclude]
    comments = []
    for i in range(count):
        rotation = week_index + salt * 3 + i
        comments.append(Comment(
            id=new_id(),
            author=commenters[rotation % len(commenters)],
            text=candidates[rotation % len(candidates)],
            week_index=week_index,
        ))
    return comments


# ---------------------------------------------------------------------------
# Post text builders
# ---------------------------------------------------------------------------

INDUSTRY_NEWS = [
    "Independent artists grabbed a record share of streams this quarter.",
    "Vinyl sales just hit their highest week of the year.",
    "Festival lineups are starting to leak. Who are you hoping to see?",
    "Streaming payouts remain the hottest debate among working artists.",
    "A major label just announced a new development deal program.",
    "Playlist editors say short intros are the new normal for singles.",
    "Ticket prices for arena tours are up again this season.",
]

TRENDING_TAGS = [
    "#NewMusicFriday", "#TourLife", "#StudioSession", "#ChartWatch",
    "#AlbumOfTheYear", "#LiveMusic", "#OnRepeat", "#ArtistToWatch",
]

NPC_CHATTER = [
    "Looking for new music recs, who is everyone listening to?",
    "Studio day. Big things coming.",
    "Nothing beats a late night drive with the right song.",
    "Hot take: the best music this year came from independents.",
    "Made a playlist for the gym, taking suggestions.",
]


@dataclass
class FeedContext:
    artist: str
    handle: str
    followers: int
    popularity: int
    reputation: int
    singles: list[Single]
    projects: list[Project]
    debuts: list[Single | Project]
    events: list[str]


def _pct_change(current: int, previous: int) -> str:
    if previous <= 0:
        return "new entry"
    change = (current - previous) / previous * 100
    return f"{change:+.1f}% vs last week"


def _chart_post_text(ctx: FeedContext) -> str:
    lines: list[str] = []
    if ctx.singles:
        top = max(ctx.singles, key=lambda w: w.current_streams)
        lines.append(
            f'Top single: "{top.title}" by {ctx.artist} with '
            f"{top.current_streams:,} streams ({_pct_change(top.current_streams, top.previous_streams)})."
        )
    if ctx.projects:
        top = max(ctx.projects, key=lambda w: w.current_streams)
        lines.append(
            f'Top project: "{top.title}" ({top.project_type.value}) with '
            f"{top.current_streams:,} streams ({_pct_change(top.current_streams, top.previous_streams)})."
        )
    for work in ctx.debuts:
        lines.append(
            f'Debut: "{work.title}" opens with {work.first_week_sales or 0:,} first-week units.'
        )
    if not lines:
        return f"Chart recap: nothing from {ctx.artist} on the chart yet. Drop something!"
    return "Chart recap. " + " ".join(lines)


def _stats_templates(ctx: FeedContext) -> list[str]:
    lifetime = sum(sum(w.streams_history) for w in ctx.singles + ctx.projects)
    releases = len(ctx.singles) + len(ctx.projects)
    return [
        f"{ctx.artist} now sits at {ctx.popularity}% popularity.",
        f"{ctx.artist} has {lifetime:,} lifetime streams across {releases} releases.",
        f"Reputation check: {ctx.artist} is at {ctx.reputation}% with industry insiders.",
        f"{ctx.artist} is followed by {ctx.followers:,} people and counting.",
    ]


def _industry_templates(ctx: FeedContext) -> list[str]:
    event_lines = [f"{ctx.artist} wrapped a {event} this week." for event in ctx.events]
    return event_lines + INDUSTRY_NEWS


def _npc_templates(ctx: FeedContext) -> list[str]:
    lines = list(NPC_CHATTER)
    for work in ctx.singles + ctx.projects:
        lines.insert(0, f'Can\'t stop replaying "{work.title}" by {ctx.artist}.')
    return lines


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def _build_context(state: CareerState, processed: CareerClock, events: Sequence[str]) -> FeedContext:
    singles = [w for w in state.catalog if isinstance(w, Single) and w.streams_history]
    projects = [w for w in state.catalog if isinstance(w, Project) and w.streams_history]
    debuts = [
        w for w in state.catalog
        if w.week_released == processed.week
        and w.year_released == processed.year
        and w.weeks_on == 1
    ]
    player = state.social.player
    artist = state.profile.artist_name if state.profile else "The artist"
    return FeedContext(
        artist=artist,
        handle=player.handle if player else player_handle(artist),
        followers=player.followers if player else 0,
        popularity=state.stats.popularity,
        reputation=state.stats.reputation,
        singles=singles,
        projects=projects,
        debuts=debuts,
        events=list(events),
    )


def _post(author: str, category: AccountCategory, text: str, week_index: int,
          salt: int, rng: RandomSource) -> Post:
    views = rng.randint(*VIEW_RANGES[category])
    likes = int(views * rng.uniform(*LIKE_RATIO))
    return Post(
        id=new_id(),
        author=author,
        category=category,
        text=text,
        week_index=week_index,
        views=views,
        likes=likes,
        comments=npc_comments(text, week_index, salt, FEED_COMMENTS_PER_POST, exclude=author),
        expires_index=week_index + FEED_POST_LIFETIME_WEEKS,
    )


def generate_feed(
    state: CareerState,
    processed: CareerClock,
    rng: RandomSource,
    events: Sequence[str] = (),
) -> list[Post]:
    """
    Build the feed for the week after `processed`. `state` must already hold
    the processed week's streams and sales. `events` describes completed
    engagements, e.g. "club gig".
    """
    ctx = _build_context(state, processed, events)
    week_index = state.clock.index
    posts: list[Post] = []

    def add(author: str, category: AccountCategory, text: str) -> None:
        posts.append(_post(author, category, text, week_index, len(posts), rng))

    add(CHART_HANDLE, AccountCategory.official_chart, _chart_post_text(ctx))

    for text in rng.sample(_stats_templates(ctx), rng.randint(*FEED_COUNTS[AccountCategory.official_stats])):
        add(STATS_HANDLE, AccountCategory.official_stats, text)

    industry = _industry_templates(ctx)
    industry_count = rng.randint(*FEED_COUNTS[AccountCategory.industry])
    # Engagement news always makes the cut
    picks = industry[:len(ctx.events)][:industry_count]
    picks += rng.sample(INDUSTRY_NEWS, industry_count - len(picks))
    for text in picks:
        add(INDUSTRY_HANDLE, AccountCategory.industry, text)

    for tag in rng.sample(TRENDING_TAGS, rng.randint(*FEED_COUNTS[AccountCategory.trending])):
        add(TRENDING_HANDLE, AccountCategory.trending,
            f"{tag} is trending with {rng.randint(5, 250)}K posts.")

    npc_count = rng.randint(*FEED_COUNTS[AccountCategory.npc])
    authors = rng.sample(NPC_ROSTER, npc_count)
    chatter = _npc_templates(ctx)
    for i, author in enumerate(authors):
        add(author.handle, AccountCategory.npc, chatter[(week_index + i) % len(chatter)])

    return posts
