from datetime import datetime, timezone

import frontmatter

DB_TIME_FORMAT = '%Y-%m-%d %H:%M:%S'
SECONDS_PER_DAY = 86400


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def to_db_time(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(DB_TIME_FORMAT)


def from_db_time(value: str) -> datetime:
    return datetime.strptime(value, DB_TIME_FORMAT).replace(tzinfo=timezone.utc)


def date_to_relative_string(date: datetime, now: datetime | None = None) -> str:
    """Format a date as `2024-02-27  142 days ago`."""
    now = now or utcnow()
    date_str = date.astimezone().strftime('%Y-%m-%d')

    days_diff = int((now - date).total_seconds() / SECONDS_PER_DAY)
    if days_diff > 0:
        relative = f"{days_diff} days ago"
    elif days_diff == 0:
        relative = 'today'
    else:
        relative = f"in {-days_diff} days"

    return f"{date_str}  {relative}"


def truncate(text: str, max_len: int) -> str:
    return text if len(text) <= max_len else text[:max_len - 1] + '…'


# ── Card text buffer ──────────────────────────────────────────

class CardHeaderHandler(frontmatter.YAMLHandler):
    """
    `---` delimited header of plain `key: value` lines.

    Values are kept exactly as typed (split on the first colon, trimmed),
    so titles like `Rust: traits`, `C# basics #1`, `yes` or `1.10` survive.
    """

    def load(self, fm: str, **kwargs) -> dict[str, str]:
        metadata = {}
        for line in fm.splitlines():
            key, sep, value = line.partition(':')
            if sep and key.strip():
                metadata[key.strip()] = value.strip()
        return metadata

    def export(self, metadata: dict, **kwargs) -> str:
        return '\n'.join(f"{key}: {value}".rstrip() for key, value in metadata.items())


CARD_HEADER = CardHeaderHandler()


def render_card_text(title: str = '', deck: str = '', body: str = '') -> str:
    """Build the editor buffer: a front matter header with title/deck, then the body."""
    header = frontmatter.dumps(frontmatter.Post('', title=title, deck=deck), handler=CARD_HEADER)
    return f"{header.strip()}\n\n{body}"


def parse_card_text(content: str) -> dict[str, str] | None:
    """
    returns: {'title': str, 'deck': str, 'body': str}, or None when there
    is no header or title/deck are missing or blank.
    """
    post = frontmatter.loads(content, handler=CARD_HEADER)

    title = post.get('title', '')
    deck = post.get('deck', '')
    if not title or not deck:
        return None

    return {'title': title, 'deck': deck, 'body': post.content.strip()}
