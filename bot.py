# bot.py
# Discord Wordle tracker: records each player's daily share, checks it against
# today's NYT puzzle, and keeps per-day leaderboards.
# Requires: discord.py, python-dotenv, requests, tenacity  (pip install -e .)

import os
import sys
import asyncio
import logging
import datetime as dt
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import discord
from discord import app_commands
from discord.ext import tasks
from dotenv import load_dotenv

from daily import DailyPuzzleCache
from ranking import rank, winners
from recorder import (
    ShareRecorder,
    Verdict,
    format_leaderboard,
    format_recent,
    format_winners,
    worth_announcing,
)
from store import SubmissionStore

# -----------------------------------------------------------------------------
# Load env
# -----------------------------------------------------------------------------

load_dotenv()  # load .env alongside this script or current working directory

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

SCRIPT_DIR = Path(__file__).resolve().parent

TOKEN = os.environ.get("DISCORD_TOKEN") or os.environ.get("TOKEN")
if not TOKEN:
    print("[fatal] DISCORD_TOKEN (or TOKEN) is missing in .env")
    sys.exit(1)

def _env_int(name: str, default: Optional[int] = None) -> int:
    v = (os.environ.get(name) or "").strip()
    if v.isdigit():
        return int(v)
    if default is not None:
        return default
    raise RuntimeError(f"Missing or invalid env: {name}")

GUILD_ID          = _env_int("GUILD_ID")
WORDLE_CHANNEL_ID = _env_int("WORDLE_CHANNEL_ID")
# Minutes after local midnight to post yesterday's winners
ANNOUNCE_MINUTE   = _env_int("ANNOUNCE_MINUTE", 5)

DB_PATH = os.environ.get("DB_PATH") or str(SCRIPT_DIR / "wordle.db")

# Canonical timezone for "today"; NYT rolls the puzzle over on US Eastern time
TZ_NAME = os.environ.get("WORDLE_TZ", "America/New_York").strip()

try:
    ZONE = ZoneInfo(TZ_NAME) if TZ_NAME else dt.timezone.utc
except ZoneInfoNotFoundError:
    ZONE = dt.timezone.utc

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger("wordlebot")

print(f"[startup] script_dir={SCRIPT_DIR}")
print(f"[startup] DB_PATH={DB_PATH}")
print(f"[startup] GUILD_ID={GUILD_ID} WORDLE_CHANNEL_ID={WORDLE_CHANNEL_ID}")
print(f"[startup] WORDLE_TZ={ZONE}")

# -----------------------------------------------------------------------------
# Core services
# -----------------------------------------------------------------------------

def today_local() -> dt.date:
    return dt.datetime.now(ZONE).date()

store = SubmissionStore(DB_PATH)
cache = DailyPuzzleCache(today=today_local)
recorder = ShareRecorder(store, cache, tz=ZONE)

# -----------------------------------------------------------------------------
# Discord client & intents
# -----------------------------------------------------------------------------

intents = discord.Intents.default()
intents.guilds = True
intents.messages = True
intents.message_content = True  # required to read share text
client = discord.Client(intents=intents)
tree = app_commands.CommandTree(client)
GUILD = discord.Object(id=GUILD_ID)


def _parse_day(raw: Optional[str], default: dt.date) -> Optional[dt.date]:
    if not raw:
        return default
    try:
        return dt.date.fromisoformat(raw.strip())
    except ValueError:
        return None


async def _send_long(interaction: discord.Interaction, out: str):
    if len(out) <= 2000:
        await interaction.followup.send(out)
        return
    # split safely if the message is too long
    for i in range(0, len(out), 1800):
        await interaction.followup.send(out[i:i+1800])


def _wordle_channel() -> Optional[discord.TextChannel]:
    guild = client.get_guild(GUILD_ID)
    ch = guild.get_channel(WORDLE_CHANNEL_ID) if guild else None
    return ch if isinstance(ch, discord.TextChannel) else None

# -----------------------------------------------------------------------------
# Slash commands
# -----------------------------------------------------------------------------

@tree.command(name="leaderboard", description="Show the Wordle leaderboard for a day", guild=GUILD)
@app_commands.describe(day="Date as YYYY-MM-DD (defaults to today)")
async def leaderboard_slash(interaction: discord.Interaction, day: Optional[str] = None):
    await interaction.response.defer(ephemeral=False)

    when = _parse_day(day, today_local())
    if when is None:
        await interaction.followup.send(f"Couldn't read {day!r} as a date, use YYYY-MM-DD.")
        return

    ranked = rank(await asyncio.to_thread(store.on_date, when), when)
    await _send_long(interaction, format_leaderboard(ranked, when))


@tree.command(name="winners", description="Show the Wordle winners for a day", guild=GUILD)
@app_commands.describe(day="Date as YYYY-MM-DD (defaults to yesterday)")
async def winners_slash(interaction: discord.Interaction, day: Optional[str] = None):
    await interaction.response.defer(ephemeral=False)

    when = _parse_day(day, today_local() - dt.timedelta(days=1))
    if when is None:
        await interaction.followup.send(f"Couldn't read {day!r} as a date, use YYYY-MM-DD.")
        return

    best = winners(await asyncio.to_thread(store.on_date, when), when)
    await interaction.followup.send(format_winners(best, when))


@tree.command(name="recent", description="Show the latest recorded Wordle shares", guild=GUILD)
@app_commands.describe(limit="How many shares to show")
async def recent_slash(interaction: discord.Interaction, limit: Optional[int] = 5):
    await interaction.response.defer(ephemeral=False)
    limit = max(1, min(limit or 5, 25))
    await _send_long(interaction, format_recent(await asyncio.to_thread(store.recent, limit)))


@tree.command(name="puzzle", description="Show today's Wordle puzzle number", guild=GUILD)
async def puzzle_slash(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    current = await asyncio.to_thread(cache.get)
    await interaction.followup.send(
        f"Today ({current.print_date.isoformat()}) is Wordle #{current.day_offset:,}"
        + (f", edited by {current.editor}" if current.editor else "")
    )

# -----------------------------------------------------------------------------
# Scheduled tasks
# -----------------------------------------------------------------------------

@tasks.loop(time=dt.time(hour=0, minute=0, tzinfo=ZONE))
async def refresh_puzzle():
    current = await asyncio.to_thread(cache.force_refresh)
    log.info("daily refresh: Wordle #%d for %s", current.day_offset, current.print_date)


@tasks.loop(time=dt.time(hour=0, minute=ANNOUNCE_MINUTE % 60, tzinfo=ZONE))
async def announce_winners():
    ch = _wordle_channel()
    if ch is None:
        log.error("Channel not found or not a TextChannel: %s", WORDLE_CHANNEL_ID)
        return

    yesterday = today_local() - dt.timedelta(days=1)
    best = winners(await asyncio.to_thread(store.on_date, yesterday), yesterday)
    if not best:
        log.info("no submissions for %s, skipping announcement", yesterday)
        return
    if not worth_announcing(best):
        log.info("nobody solved Wordle on %s, skipping announcement", yesterday)
        return
    try:
        await ch.send(format_winners(best, yesterday))
    except discord.HTTPException as e:
        log.warning("couldn't announce winners for %s: %s", yesterday, e)

# -----------------------------------------------------------------------------
# Events
# -----------------------------------------------------------------------------

@client.event
async def on_ready():
    print(f"Logged in as {client.user}")

    store.initialize()

    # Sync app commands to this guild (fast; avoids global propagation delay)
    try:
        await tree.sync(guild=GUILD)
        print("[startup] slash commands synced to guild")
    except discord.HTTPException as e:
        print(f"[startup] slash sync failed: {e}")

    # Cache today's puzzle before the first share arrives
    current = await asyncio.to_thread(cache.get)
    print(f"[startup] today is Wordle #{current.day_offset} ({current.print_date})")

    if not refresh_puzzle.is_running():
        refresh_puzzle.start()
    if not announce_winners.is_running():
        announce_winners.start()


@client.event
async def on_message(msg: discord.Message):
    """
    Record Wordle shares posted in the configured channel and react with the
    verdict: accepted, rejected, wrong day, or already submitted.
    """
    if msg.guild is None:
        return
    if msg.channel.id != WORDLE_CHANNEL_ID:
        return
    if msg.author.bot:
        return

    # Metadata refresh may hit the network; keep it off the event loop
    outcome = await asyncio.to_thread(
        recorder.record,
        msg.content,
        msg.author.display_name,
        msg.author.id,
        msg.created_at,
    )
    if outcome.verdict is Verdict.IGNORED:
        return

    for emoji in outcome.reactions:
        try:
            await msg.add_reaction(emoji)
        except discord.HTTPException as e:
            log.warning("couldn't react to %s: %s", msg.id, e)

    if outcome.verdict is Verdict.ACCEPTED:
        log.info("Recorded %s from %s", outcome.puzzle.header, msg.author)
    else:
        log.info("%s: %s (%s)", msg.author, outcome.message, outcome.verdict.value)

# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    try:
        client.run(TOKEN, log_handler=None)
    except KeyboardInterrupt:
        print("Shutting down…")
