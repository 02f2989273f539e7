from __future__ import annotations

import asyncio
import logging
from functools import partial

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.types import BotCommand

from app.bot.routers import bedtime, commands
from app.config import settings
from app.services.prediction import load_predictor


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def setup_bot_commands(bot: Bot) -> None:
    commands_list = [
        BotCommand(command="start", description="Open the bedtime form"),
        BotCommand(command="bedtime", description="Calculate a suggested bedtime"),
        BotCommand(command="help", description="Show help"),
    ]
    await bot.set_my_commands(commands_list)


def build_dispatcher() -> Dispatcher:
    # the model is reloaded on each estimate, only the path is bound here;
    # joblib.load runs synchronously and blocks the event loop for that time
    dp = Dispatcher(predictor_loader=partial(load_predictor, settings.sleep_model_path))
    # commands first so /help is not read as a wake time while the form is open
    dp.include_router(commands.router)
    dp.include_router(bedtime.router)
    return dp


async def main() -> None:
    if not settings.sleep_model_path.is_file():
        logger.warning(f"Sleep model not found at {settings.sleep_model_path}; every estimate will fail")
    bot = Bot(
        token=settings.telegram_token.get_secret_value(),
        default=DefaultBotProperties(parse_mode="HTML"),
    )
    await setup_bot_commands(bot)
    dp = build_dispatcher()
    await dp.start_polling(bot)


if __name__ == "__main__":
    asyncio.run(main())
