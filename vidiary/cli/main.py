"""Main CLI application using Cyclopts.

The CLI is a thin consumer of the partition cache: every command opens the
diary, performs one action and closes it again.
"""

import cyclopts

from vidiary.cli.commands import videos, watched

app = cyclopts.App(
    name="vidiary",
    help="Video diary - keep short clips organised by day",
)

app.command(videos.add, name="add")
app.command(videos.list_videos, name="list")
app.command(videos.rename, name="rename")
app.command(videos.delete, name="delete")
app.command(videos.export, name="export")
app.command(videos.random_moment, name="random")
app.command(watched.watched, name="watched")


def main() -> None:
    app()
