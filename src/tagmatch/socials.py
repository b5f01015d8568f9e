"""
Social and platform accounts.

Each platform is a facet (or a small group of facets) layered on the plain
name facet. A SocialFacet knows its platform's base address so that a
pasted profile URL is reduced to the bare handle before storage:

    "https://twitch.tv/slushie"  -> "slushie"
    "@slushie"                   -> "slushie"

Platforms separate persistent identifiers (ids and slugs issued by the
platform, which never change) from display usernames (which players change
whenever they like). A persistent-id hit is reported with its own
FilterOptions bit so it outranks a display-name hit.

Platforms:
- Battlefy (tournament platform): slugs + persistent ids, display usernames
- Discord (chat platform): persistent ids, display usernames
- Twitch, Twitter, Sendou: handles
- Plus membership: tier history, not matched by queries
- Friend codes (console): persistent, matched after parsing the query
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Optional

from tagmatch.errors import InvalidFacetValueError
from tagmatch.facets import NameEntry, NameFacet
from tagmatch.matching.matcher import Matcher
from tagmatch.matching.options import FilterOptions
from tagmatch.sources import Source, canonical_sources


# Three groups of four digits, optionally prefixed "SW"/"FC" and bracketed
FRIEND_CODE_PATTERN = re.compile(
    r"\(?(?:SW|FC)?\s*[:=-]?\s?([0-9]{4})\s*[-. _/=]\s*([0-9]{4})\s*[-. _/=]\s*([0-9]{4})\s*\)?",
    re.IGNORECASE,
)
TWELVE_DIGITS_PATTERN = re.compile(r"(?:[^0-9]|^)([0-9]{12})(?:[^0-9]|$)")


def parse_friend_code(raw: Any) -> Optional[str]:
    """
    Find a friend code in free text and format it as ``####-####-####``.

    Accepts separated groups ("SW-1234-5678-9012", "(FC: 1234 5678 9012)"),
    a bare 12-digit run, or a 9-12 digit number whose leading zeros were
    dropped. A group of all zeros is not a valid code.

    Examples:
        >>> parse_friend_code("SW-1234-5678-9012")
        '1234-5678-9012'
        >>> parse_friend_code(12345678901)
        '0123-4567-8901'
        >>> parse_friend_code("Slushie") is None
        True
    """
    if raw is None or isinstance(raw, bool):
        return None
    value = str(raw).strip()
    if not value:
        return None

    if value.isascii() and value.isdigit():
        if not 9 <= len(value) <= 12:
            return None
        digits = value.zfill(12)
        groups = (digits[:4], digits[4:8], digits[8:])
    else:
        match = FRIEND_CODE_PATTERN.search(value)
        if match is None:
            stripped = re.sub(r"[-. _/()]", "", value)
            match = TWELVE_DIGITS_PATTERN.search(stripped)
            if match is None:
                return None
            digits = match.group(1)
            groups = (digits[:4], digits[4:8], digits[8:])
        else:
            groups = match.groups()

    if "0000" in groups:
        return None
    return "-".join(groups)


class SocialFacet(NameFacet):
    """A list of handles on one platform, most recent first."""

    base_address: str = ""

    def normalize_handle(self, raw: str) -> str:
        """
        Reduce a raw handle or profile URL to the bare handle.

        Examples:
            >>> TwitchFacet().normalize_handle("https://www.twitch.tv/slushie")
            'slushie'
            >>> TwitchFacet().normalize_handle("@slushie")
            'slushie'
        """
        value = raw.strip()
        if self.base_address:
            match = re.search(re.escape(self.base_address), value, re.IGNORECASE)
            if match is not None:
                value = value[match.end():]
        return value.lstrip("/@").strip()

    def validate_value(self, value: Any) -> str:
        handle = self.normalize_handle(super().validate_value(value))
        if not handle:
            raise InvalidFacetValueError(
                f"{type(self).__name__} handle is empty after normalizing {value!r}"
            )
        return handle

    def profile_url(self, handle: Optional[str] = None) -> Optional[str]:
        """Rebuild the canonical profile URL for a handle (default: current)."""
        handle = handle or self.current
        if handle is None:
            return None
        return f"https://{self.base_address.rstrip('/')}/{handle}"

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        return FilterOptions.NONE


class TwitchFacet(SocialFacet):
    base_address = "twitch.tv"

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        return matcher.match_facet(self, FilterOptions.TWITCH, FilterOptions.TWITCH)


class TwitterFacet(SocialFacet):
    base_address = "twitter.com"

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        return matcher.match_facet(self, FilterOptions.TWITTER, FilterOptions.TWITTER)


class SendouFacet(SocialFacet):
    base_address = "sendou.ink/u"

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        return matcher.match_facet(self, FilterOptions.SENDOU, FilterOptions.SENDOU)


class BattlefySlugFacet(SocialFacet):
    base_address = "battlefy.com/users"


class BattlefyTeamIdFacet(SocialFacet):
    base_address = "battlefy.com/teams"


class PlusMembershipFacet(SocialFacet):
    """
    Plus-server membership history.

    Each value has the form ``level/yyyy/M``: the tier the player held in
    that month. Tiers are informational and never matched against queries.
    """

    base_address = "sendou.ink/plus/history"

    def add_level(self, level: Optional[int], source: Source) -> NameEntry[str]:
        """Record the tier held when ``source`` started."""
        start = source.start
        return self.add(f"{'' if level is None else level}/{start.year}/{start.month}", source)

    @staticmethod
    def level_of(value: str) -> Optional[int]:
        try:
            return int(value.split("/")[0])
        except (ValueError, IndexError):
            return None

    @staticmethod
    def date_of(value: str) -> Optional[datetime]:
        try:
            parts = value.split("/")
            return datetime(int(parts[1]), int(parts[2]), 1, tzinfo=timezone.utc)
        except (ValueError, IndexError):
            return None

    @property
    def current_level(self) -> Optional[int]:
        return self.level_of(self.current) if self.current else None


class FriendCodeFacet(NameFacet):
    """
    Console friend codes, stored as ``####-####-####``.

    A friend code is a persistent identifier: a query that parses as the
    same code matches exactly, whatever separators or prefix it was typed
    with.
    """

    def validate_value(self, value: Any) -> str:
        code = parse_friend_code(value)
        if code is None:
            raise InvalidFacetValueError(f"Not a friend code: {value!r}")
        return code

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        if matcher.options.query_is_regex:
            return matcher.match_persistent(self, FilterOptions.FRIEND_CODE)
        if not matcher.options.allows(FilterOptions.FRIEND_CODE):
            return FilterOptions.NONE
        code = parse_friend_code(matcher.query)
        if code is not None and code in self:
            return FilterOptions.FRIEND_CODE
        return FilterOptions.NONE


@dataclass(eq=True)
class SocialProfile:
    """
    Base for platforms made of several facets.

    Subclasses declare their facets as dataclass fields; merge, sources and
    serialization work across all of them.
    """

    def merge(self, other: "SocialProfile"):
        if type(other) is not type(self):
            raise TypeError(f"Cannot merge {type(self).__name__} with {type(other).__name__}")
        return type(self)(**{
            f.name: getattr(self, f.name).merge(getattr(other, f.name))
            for f in fields(self)
        })

    @property
    def sources(self) -> tuple[Source, ...]:
        return canonical_sources(
            source
            for f in fields(self)
            for source in getattr(self, f.name).sources
        )

    def is_empty(self) -> bool:
        return all(len(getattr(self, f.name)) == 0 for f in fields(self))

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name).to_dict() for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        # Facet classes are taken from each field's default factory
        template = cls()
        return cls(**{
            f.name: type(getattr(template, f.name)).from_dict(data.get(f.name, []))
            for f in fields(cls)
        })


@dataclass(eq=True)
class BattlefyProfile(SocialProfile):
    """A player's tournament-platform account(s)."""

    slugs: BattlefySlugFacet = field(default_factory=BattlefySlugFacet)
    usernames: NameFacet = field(default_factory=NameFacet)
    persistent_ids: NameFacet = field(default_factory=NameFacet)

    def add_slug(self, slug: str, source: Source) -> NameEntry[str]:
        return self.slugs.add(slug, source)

    def add_username(self, username: str, source: Source) -> NameEntry[str]:
        return self.usernames.add(username, source)

    def add_persistent_id(self, persistent_id: str, source: Source) -> NameEntry[str]:
        return self.persistent_ids.add(persistent_id, source)

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        return (
            matcher.match_persistent(self.persistent_ids, FilterOptions.BATTLEFY_PERSISTENT_ID)
            | matcher.match_persistent(self.slugs, FilterOptions.BATTLEFY_SLUG)
            | matcher.match_facet(
                self.usernames,
                FilterOptions.BATTLEFY_USERNAME,
                FilterOptions.BATTLEFY_USERNAME,
            )
        )


@dataclass(eq=True)
class BattlefyTeamProfile(SocialProfile):
    """A team's tournament-platform ids."""

    persistent_ids: BattlefyTeamIdFacet = field(default_factory=BattlefyTeamIdFacet)

    def add_persistent_id(self, persistent_id: str, source: Source) -> NameEntry[str]:
        return self.persistent_ids.add(persistent_id, source)

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        return matcher.match_persistent(self.persistent_ids, FilterOptions.BATTLEFY_PERSISTENT_ID)


@dataclass(eq=True)
class DiscordProfile(SocialProfile):
    """A player's chat-platform account(s)."""

    ids: NameFacet = field(default_factory=NameFacet)
    usernames: NameFacet = field(default_factory=NameFacet)

    def add_id(self, discord_id: str, source: Source) -> NameEntry[str]:
        return self.ids.add(discord_id, source)

    def add_username(self, username: str, source: Source) -> NameEntry[str]:
        return self.usernames.add(username, source)

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        return (
            matcher.match_persistent(self.ids, FilterOptions.DISCORD_ID)
            | matcher.match_facet(self.usernames, FilterOptions.DISCORD_NAME, FilterOptions.DISCORD_NAME)
        )
