"""
JSON Reader
───────────
Sub-format is detected per file:

  1. the whole file is one JSON document
       • an array of objects          → one record per object
       • an object of equal arrays    → column-oriented table
       • any other object             → one record
  2. newline-delimited JSON, one object per line
  3. a tweet stream (newline-delimited tweet objects) → flattened to a
     fixed docvar set; the text field is implied. A file with any tweet
     is a stream; its other objects (delete or limit notices) are skipped

Nested objects are flattened with "." separators (pandas.json_normalize).
"""

import json
import logging
from typing import Any, Dict, List

import pandas as pd

from ..core.base_reader import BaseReader, frame_to_records, registry
from ..core.config import ReadContext
from ..core.errors import ConfigurationError, FormatError
from ..core.models import FileFormat, Record, ResolvedFile
from .text_reader import read_text

log = logging.getLogger(__name__)

TWEET_KEYS = {"id_str", "user", "created_at"}

USER_FIELDS = {
    "listed_count":     "listed_count",
    "verified":         "verified",
    "location":         "location",
    "user_id_str":      "id_str",
    "description":      "description",
    "geo_enabled":      "geo_enabled",
    "user_created_at":  "created_at",
    "statuses_count":   "statuses_count",
    "followers_count":  "followers_count",
    "favourites_count": "favourites_count",
    "protected":        "protected",
    "user_url":         "url",
    "name":             "name",
    "time_zone":        "time_zone",
    "user_lang":        "lang",
    "utc_offset":       "utc_offset",
    "friends_count":    "friends_count",
    "screen_name":      "screen_name",
}

TWEET_FIELDS = [
    "retweet_count", "favorite_count", "favorited", "truncated", "id_str",
    "in_reply_to_screen_name", "source", "retweeted", "created_at",
    "in_reply_to_status_id_str", "in_reply_to_user_id_str", "lang",
]

PLACE_FIELDS = {
    "country_code": "country_code",
    "country":      "country",
    "place_type":   "place_type",
    "full_name":    "full_name",
    "place_name":   "name",
    "place_id":     "id",
}


def is_tweet(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and TWEET_KEYS.issubset(obj.keys())
        and ("text" in obj or "full_text" in obj)
    )


def flatten_tweet(tweet: Dict[str, Any]) -> Record:
    """Reduce one tweet object to text plus a flat docvar mapping."""
    user  = tweet.get("user") or {}
    place = tweet.get("place") or {}

    text = (
        tweet.get("full_text")
        or (tweet.get("extended_tweet") or {}).get("full_text")
        or tweet.get("text")
        or ""
    )

    docvars: Dict[str, Any] = {name: tweet.get(name) for name in TWEET_FIELDS}
    for name, key in USER_FIELDS.items():
        docvars[name] = user.get(key)
    for name, key in PLACE_FIELDS.items():
        docvars[name] = place.get(key)

    # GeoJSON order is [lon, lat]
    coords = (tweet.get("coordinates") or {}).get("coordinates") or [None, None]
    docvars["lon"], docvars["lat"] = coords[0], coords[1]

    urls = (tweet.get("entities") or {}).get("urls") or []
    first = urls[0] if urls else {}
    docvars["expanded_url"] = first.get("expanded_url")
    docvars["url"]          = first.get("url")

    return Record(text=text, docvars=docvars)


def needs_text_field(file: ResolvedFile, ctx: ReadContext) -> bool:
    """
    Whether reading `file` needs a text_field, decided before any file is read.
    Tweets imply their own text; empty or malformed files are left for the
    reader to report.
    """
    content = read_text(file, ctx)
    if not content.strip():
        return False
    try:
        document = json.loads(content)
    except json.JSONDecodeError:
        for line in content.splitlines():
            if not line.strip():
                continue
            try:
                if is_tweet(json.loads(line)):
                    return False
            except json.JSONDecodeError:
                return False
        return True
    if isinstance(document, list):
        return not any(is_tweet(o) for o in document)
    return not is_tweet(document)


@registry.register
class JsonReader(BaseReader):
    SUPPORTED_FORMATS = [FileFormat.JSON]

    def read(self, file: ResolvedFile, text_field, ctx: ReadContext) -> List[Record]:
        content = read_text(file, ctx)
        if not content.strip():
            return []

        try:
            document = json.loads(content)
        except json.JSONDecodeError:
            objects = self._parse_lines(content, file)
            if any(is_tweet(obj) for obj in objects):
                return self._read_tweets(objects, file, ctx)
            ctx.detail(f"{file.name}: line-delimited JSON, {len(objects)} objects")
            frame = pd.json_normalize(objects)
        else:
            if is_tweet(document):
                return [flatten_tweet(document)]
            if isinstance(document, list) and any(is_tweet(o) for o in document):
                return self._read_tweets(document, file, ctx)
            ctx.detail(f"{file.name}: single JSON document")
            frame = self._frame_from_document(document, file)

        if text_field is None:
            raise ConfigurationError(
                f"text_field must be specified for JSON file {file.path}"
            )
        if frame.empty:
            return []
        return frame_to_records(frame, text_field, file.path)

    # ── private ───────────────────────────────────────────────────────────

    @staticmethod
    def _read_tweets(objects: List[Any], file: ResolvedFile, ctx: ReadContext) -> List[Record]:
        # stream files interleave control messages ({"delete": ...}, {"limit": ...})
        tweets = [obj for obj in objects if is_tweet(obj)]
        skipped = len(objects) - len(tweets)
        ctx.detail(f"{file.name}: tweet stream, {len(tweets)} tweets")
        if skipped:
            ctx.detail(f"{file.name}: skipped {skipped} non-tweet object(s)")
        return [flatten_tweet(obj) for obj in tweets]

    @staticmethod
    def _parse_lines(content: str, file: ResolvedFile) -> List[Dict[str, Any]]:
        objects: List[Dict[str, Any]] = []
        for lineno, line in enumerate(content.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as exc:
                raise FormatError(file.path, f"malformed JSON at line {lineno}: {exc.msg}")
            if not isinstance(obj, dict):
                raise FormatError(file.path, f"line {lineno} is not a JSON object")
            objects.append(obj)
        return objects

    @staticmethod
    def _frame_from_document(document: Any, file: ResolvedFile) -> pd.DataFrame:
        if isinstance(document, list):
            if not all(isinstance(o, dict) for o in document):
                raise FormatError(file.path, "JSON array must contain only objects")
            return pd.json_normalize(document)

        if isinstance(document, dict):
            values = list(document.values())
            columnar = (
                values
                and all(isinstance(v, list) for v in values)
                and len({len(v) for v in values}) == 1
            )
            if columnar:
                return pd.DataFrame(document)
            return pd.json_normalize([document])

        raise FormatError(file.path, "JSON document must be an object or an array of objects")
