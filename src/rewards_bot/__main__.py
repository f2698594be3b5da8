"""Rewards Bot 主入口"""

from rewards_bot.run import main


if __name__ == "__main__":
    main()
