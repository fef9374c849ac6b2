# games.py
"""
Mini-games and fun commands.

Each game is split into a pure "roll" (which takes a random.Random so results
can be pinned in tests) and an embed/text renderer used by the commands.
"""

from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Optional, Sequence

import discord

from config import SETUP_COLOR
from helpers import get_safe_color, parse_leading_int

# ---------------- Rock, Paper, Scissors ----------------
ROCK, PAPER, SCISSORS = "🪨", "📄", "✂️"
RPS_CHOICES = (ROCK, PAPER, SCISSORS)
_RPS_ALIASES = {
    "rock": ROCK, "r": ROCK,
    "paper": PAPER, "p": PAPER,
    "scissors": SCISSORS, "s": SCISSORS,
}
_BEATS = {ROCK: SCISSORS, PAPER: ROCK, SCISSORS: PAPER}

RPS_TIE = "It's a Tie! 🤝"
RPS_WIN = "You Win! 🎉"
RPS_LOSE = "I Win! 🤖"


def parse_rps_choice(text: str | None) -> Optional[str]:
    if not text:
        return None
    return _RPS_ALIASES.get(text.strip().lower())


def rps_result(user: str, bot: str) -> str:
    if user == bot:
        return RPS_TIE
    if _BEATS[user] == bot:
        return RPS_WIN
    return RPS_LOSE


def rps_embed(user: str, rng: random.Random = random) -> discord.Embed:
    bot_choice = rng.choice(RPS_CHOICES)
    result = rps_result(user, bot_choice)
    return discord.Embed(
        title="🪨 Rock, Paper, Scissors ✂️",
        description=f"You: {user}\nMe: {bot_choice}\n\n**{result}**",
        color=get_safe_color(SETUP_COLOR),
    )


# ---------------- Guess the number ----------------
GUESS_MIN, GUESS_MAX = 1, 10


def parse_guess(text: str | None) -> Optional[int]:
    n = parse_leading_int(text)
    if n is None or not (GUESS_MIN <= n <= GUESS_MAX):
        return None
    return n


def guess_reply(guess: int, rng: random.Random = random) -> str:
    number = rng.randint(GUESS_MIN, GUESS_MAX)
    if guess == number:
        return f"🎉 **Correct!** The number was indeed **{number}**."
    return f"❌ **Wrong!** I was thinking of **{number}**. Try again!"


# ---------------- Duel ----------------
def duel_error(challenger: discord.abc.User, target: discord.abc.User | None) -> Optional[str]:
    if target is None:
        return "⚠️ Mention someone to duel! Usage: `!duel @User`"
    if target.id == challenger.id:
        return "❌ You cannot duel yourself."
    if target.bot:
        return "❌ You cannot duel a bot."
    return None


def duel_embed(challenger: discord.abc.User, target: discord.abc.User, rng: random.Random = random) -> discord.Embed:
    winner = challenger if rng.random() > 0.5 else target
    return discord.Embed(
        title="⚔️ The Duel Begins!",
        description=(
            f"**{challenger.name}** 🆚 **{target.name}**\n\n...fighting...\n\n"
            f"🏆 **Winner:** {winner.mention}"
        ),
        color=0xE74C3C,
    )


# ---------------- Slots ----------------
SLOT_ITEMS = ("🍒", "🍋", "🍇", "💎", "7️⃣")


def spin_slots(rng: random.Random = random) -> tuple[str, str, str]:
    return (rng.choice(SLOT_ITEMS), rng.choice(SLOT_ITEMS), rng.choice(SLOT_ITEMS))


def slots_embed(reels: Sequence[str]) -> discord.Embed:
    is_win = len(set(reels)) == 1
    outcome = "**JACKPOT! You won!** 💰" if is_win else "You lost. Better luck next time."
    return discord.Embed(
        title="🎰 Slot Machine",
        description=f"[ {' | '.join(reels)} ]\n\n{outcome}",
        color=0xF1C40F if is_win else 0x2F3136,
    )


# ---------------- Trivia ----------------
@dataclass(frozen=True)
class TriviaQuestion:
    question: str
    answers: tuple[str, ...]

    def is_correct(self, reply: str | None) -> bool:
        return (reply or "").strip().lower() in self.answers


TRIVIA_QUESTIONS = (
    TriviaQuestion("What is the capital of France?", ("paris",)),
    TriviaQuestion("How many wheels does a standard semi-truck have?", ("18",)),
    TriviaQuestion("What color is the sky on a clear day?", ("blue",)),
    TriviaQuestion("What company is this bot for?", ("northstar", "northstar vtc", "nsl")),
)

ANSWER_TIMEOUT_SECONDS = 10.0


def pick_trivia(rng: random.Random = random) -> TriviaQuestion:
    return rng.choice(TRIVIA_QUESTIONS)


# ---------------- Would you rather ----------------
WYR_SCENARIOS = (
    "Would you rather always have to say everything on your mind OR never be able to speak again?",
    "Would you rather have a truck that never runs out of fuel OR a truck that never needs repairs?",
    "Would you rather drive in snow forever OR drive in rain forever?",
    "Would you rather fight 100 duck-sized horses OR 1 horse-sized duck?",
)


def wyr_embed(rng: random.Random = random) -> discord.Embed:
    e = discord.Embed(
        title="🤔 Would You Rather...",
        description=rng.choice(WYR_SCENARIOS),
        color=get_safe_color(SETUP_COLOR),
    )
    e.set_footer(text="Reply with your choice!")
    return e


# ---------------- Quick maths ----------------
@dataclass(frozen=True)
class MathProblem:
    a: int
    op: str
    b: int

    @property
    def answer(self) -> int:
        if self.op == "+":
            return self.a + self.b
        if self.op == "-":
            return self.a - self.b
        return self.a * self.b

    def __str__(self) -> str:
        return f"{self.a} {self.op} {self.b}"

    def is_correct(self, reply: str | None) -> bool:
        return parse_leading_int(reply) == self.answer


def make_math_problem(rng: random.Random = random) -> MathProblem:
    return MathProblem(rng.randint(1, 50), rng.choice(("+", "-", "*")), rng.randint(1, 50))


# ---------------- Search ----------------
SEARCH_LOCATIONS = ("Car", "Grass", "Pockets", "Sofa", "Truck Cabin")
SEARCH_OUTCOMES = (
    "found a shiny coin! 🪙",
    "found an old receipt.",
    "found a spider! 🕷️",
    "found a lost diamond ring! 💍",
    "found absolutely nothing.",
)


def search_reply(rng: random.Random = random) -> str:
    return f"🔍 You searched the **{rng.choice(SEARCH_LOCATIONS)}** and {rng.choice(SEARCH_OUTCOMES)}"


# ---------------- Delivery ----------------
DELIVERY_CITIES = ("London", "Paris", "Berlin", "Amsterdam", "Rome", "Madrid", "Prague")
DELIVERY_CARGOS = ("Medical Vaccines", "Heavy Machinery", "Electronics", "Fresh Fruit", "Furniture")
DELIVERY_ICON = "https://cdn-icons-png.flaticon.com/512/759/759089.png"
PAY_PER_KM = 2


@dataclass(frozen=True)
class Delivery:
    start: str
    end: str
    cargo: str
    distance_km: int

    @property
    def earnings(self) -> int:
        return self.distance_km * PAY_PER_KM


def roll_delivery(rng: random.Random = random) -> Delivery:
    start, end = rng.sample(DELIVERY_CITIES, 2)
    return Delivery(start, end, rng.choice(DELIVERY_CARGOS), rng.randint(100, 2099))


def delivery_embed(job: Delivery) -> discord.Embed:
    e = discord.Embed(title="🚚 Delivery Completed!", color=get_safe_color(SETUP_COLOR))
    e.add_field(name="📦 Cargo", value=job.cargo, inline=True)
    e.add_field(name="📍 Route", value=f"{job.start} ➡️ {job.end}", inline=True)
    e.add_field(name="📏 Distance", value=f"{job.distance_km} km", inline=True)
    e.add_field(name="💵 Earnings", value=f"${job.earnings}", inline=True)
    e.set_thumbnail(url=DELIVERY_ICON)
    e.set_footer(text="NorthStar Logistics • Keep on trucking!")
    return e
