"""HTML page rendering for the list and detail views."""

from __future__ import annotations

from html import escape
from textwrap import dedent
from urllib.parse import urlencode

from .models import DetailView, FilterState, Record


PAGE_TEMPLATE = dedent(
    """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>__TITLE__</title>
    <meta name="description" content="__DESCRIPTION__" />
</head>
<body>
    <a class="skip-link" href="#main-content">Skip to content</a>
    <div class="sr-only" role="status" aria-live="polite">__ANNOUNCEMENT__</div>
    <main id="main-content" tabindex="-1">
__CONTENT__
    </main>
</body>
</html>
"""
)


def render_page(
    title: str, content: str, *, description: str = "", announcement: str = ""
) -> str:
    return (
        PAGE_TEMPLATE.replace("__TITLE__", escape(title))
        .replace("__DESCRIPTION__", escape(description))
        .replace("__ANNOUNCEMENT__", escape(announcement))
        .replace("__CONTENT__", content)
    )


def render_list_page(
    app_name: str,
    posts: list[Record],
    state: FilterState,
    favorites: frozenset[int],
    *,
    announcement: str = "",
    error: str | None = None,
    total: int = 0,
) -> str:
    """Render the browse view for the currently visible posts."""

    title = f"{app_name} - Posts"
    if error:
        content = (
            '        <div class="error" role="alert">\n'
            "            <h2>Error fetching posts</h2>\n"
            f"            <p>{escape(error)}</p>\n"
            "        </div>"
        )
        return render_page(title, content, announcement=announcement)
    if total == 0:
        content = "        <p>No posts found or failed to load.</p>"
        return render_page(title, content, announcement=announcement)

    parts = [f"        <h1>{escape(app_name)}</h1>", _search_form(state)]
    if favorites:
        parts.append(_favorites_summary(len(favorites)))
    parts.append(
        f'        <div class="sr-only" aria-live="polite">{len(posts)} posts displayed</div>'
    )

    list_label = "Favorite posts" if state.favorites_only else "All posts"
    parts.append('        <nav aria-label="Posts">')
    parts.append(f'        <ul aria-label="{list_label}">')
    if posts:
        return_to = _list_url(state)
        for post in posts:
            parts.append(_post_item(post, post.id in favorites, return_to))
    else:
        empty = (
            "No favorites match your filter."
            if state.favorites_only
            else "No posts match your filter."
        )
        parts.append(f'            <li class="empty">{empty}</li>')
    parts.append("        </ul>")
    parts.append("        </nav>")

    return render_page(
        title,
        "\n".join(parts),
        description=f"Browse and favorite posts from {app_name}",
        announcement=announcement,
    )


def render_detail_page(app_name: str, view: DetailView) -> str:
    """Render either the post itself or the error that replaced it."""

    if view.error is not None:
        error = view.error
        lines = [
            '        <div class="error">',
            f"            <h1>{escape(error.kind.heading)}</h1>",
            f"            <p>{escape(error.message)}</p>",
        ]
        if error.requested_id:
            lines.append(
                f'            <p class="requested-id">Requested ID: {escape(error.requested_id)}</p>'
            )
        lines.append('            <a href="/">Return to Post List</a>')
        lines.append("        </div>")
        return render_page(f"{error.kind.heading} - {app_name}", "\n".join(lines))

    record = view.record
    assert record is not None
    lines = [
        '        <a href="/">&larr; Back to List</a>',
        "        <article>",
        f"            <h1>{escape(record.title)}</h1>",
        f"            <p>{escape(record.body)}</p>",
        f'            <p class="meta">Post ID: {record.id} | User ID: {record.owner_id}</p>',
        "        </article>",
    ]
    return render_page(f"{record.display_title()} - {app_name}", "\n".join(lines))


def _search_form(state: FilterState) -> str:
    checked = " checked" if state.favorites_only else ""
    lines = [
        '        <form role="search" aria-label="Filter posts" method="get" action="/">',
        '            <label for="filter-input" class="sr-only">Search by title</label>',
        f'            <input id="filter-input" type="text" name="q" value="{escape(state.query)}"'
        ' placeholder="Filter posts by title..." />',
        f'            <label><input type="checkbox" name="favorites" value="true"{checked} />'
        " Show favorites only</label>",
        '            <button type="submit">Apply</button>',
        "        </form>",
    ]
    return "\n".join(lines)


def _favorites_summary(count: int) -> str:
    noun = "post" if count == 1 else "posts"
    return (
        '        <div class="favorites-summary" aria-live="polite">'
        f"<p>You have <strong>{count}</strong> favorite {noun}</p></div>"
    )


def _post_item(post: Record, is_favorite: bool, return_to: str) -> str:
    action = "Remove from favorites" if is_favorite else "Add to favorites"
    marker = "&#9733;" if is_favorite else "&#9734;"
    query = urlencode({"next": return_to})
    title = escape(post.title)
    lines = [
        "            <li>",
        f'                <a href="/items/{post.id}">{title}</a>',
        f'                <form method="post" action="/favorites/{post.id}?{escape(query)}">',
        f'                    <button type="submit" aria-pressed="{str(is_favorite).lower()}"'
        f' aria-label="{action}: {title}">{marker}</button>',
        "                </form>",
        "            </li>",
    ]
    return "\n".join(lines)


def _list_url(state: FilterState) -> str:
    params: dict[str, str] = {}
    if state.query:
        params["q"] = state.query
    if state.favorites_only:
        params["favorites"] = "true"
    if not params:
        return "/"
    return f"/?{urlencode(params)}"
