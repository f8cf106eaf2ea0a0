#!/usr/bin/env python3
"""
对战脚本

Usage:
    python scripts/play.py --mode watch --games 10   # 观看随机对局
    python scripts/play.py --mode play               # 作为 0 号座位与随机玩家对战
    python scripts/play.py --max-bid 2 --seed 42
"""
import argparse
import json
import logging
import sys
from pathlib import Path
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

import numpy as np

from dizhu.cards import counts_to_str
from dizhu.config import GameConfig
from env import DoudizhuEnv

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Dou Dizhu Play")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch random self-play or play against random players",
    )
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--max-bid", type=int, default=3, help="Highest bid")
    parser.add_argument("--delay", type=float, default=0.0, help="Delay between moves")
    parser.add_argument("--verbose", action="store_true", help="Print every move")
    parser.add_argument("--output", type=str, help="Output JSON file for watch results")

    return parser.parse_args()


def watch_game(args):
    """观看随机对局"""
    env = DoudizhuEnv(config=GameConfig(max_bid=args.max_bid, seed=args.seed))
    totals = np.zeros(env.game.num_players())
    no_bid_games = 0
    landlord_wins = 0
    springs = 0
    bombs = 0
    lengths = []

    for game_idx in range(args.games):
        obs, info = env.reset()
        done = False
        step = 0

        while not done:
            player = info["current_player"]
            action = env.sample_action()
            if args.verbose:
                logger.info(f"Player {player}: {env.state.action_to_string(player, action)}")

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            step += 1
            time.sleep(args.delay)

        returns = info["returns"]
        totals += returns
        lengths.append(step)
        bombs += info["bombs_count"]
        if info.get("winner") is None:
            no_bid_games += 1
        else:
            landlord = info["landlord"]
            landlord_wins += int(info["winner"] == landlord)
            springs += int(info["is_spring"])

        logger.info(f"Game {game_idx + 1}/{args.games}: {step} moves, returns {returns}")
        if args.verbose:
            logger.info(str(env.state))

    played = max(args.games - no_bid_games, 1)
    result = {
        "games_played": args.games,
        "no_bid_games": no_bid_games,
        "landlord_win_rate": landlord_wins / played,
        "spring_rate": springs / played,
        "bomb_rate": bombs / max(args.games, 1),
        "avg_length": float(np.mean(lengths)) if lengths else 0.0,
        "avg_returns": (totals / max(args.games, 1)).tolist(),
    }

    logger.info("=" * 60)
    logger.info(f"Games without bid: {no_bid_games}")
    logger.info(f"Landlord Win Rate: {result['landlord_win_rate']:.2%}")
    logger.info(f"Spring Rate: {result['spring_rate']:.2%}")
    logger.info(f"Bomb Rate: {result['bomb_rate']:.2f}")
    logger.info(f"Average Length: {result['avg_length']:.1f}")
    logger.info(f"Average returns: {result['avg_returns']}")
    logger.info("=" * 60)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result, f, indent=2)
        logger.info(f"Results saved to {args.output}")

    return result


def play_game(args):
    """作为 0 号座位与随机玩家对战"""
    env = DoudizhuEnv(config=GameConfig(max_bid=args.max_bid, seed=args.seed))
    human = 0

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        obs, info = env.reset()
        done = False

        while not done:
            player = info["current_player"]
            legal_actions = info["legal_actions"]

            if player == human:
                print(f"\n你的手牌: {counts_to_str(env.state.hand(human))}")
                print(env.state)
                print("\n可选动作:")
                for i, action in enumerate(legal_actions[:30]):  # 只显示前30个
                    print(f"  {i}: {env.state.action_to_string(player, action)}")
                if len(legal_actions) > 30:
                    print(f"  ... 还有 {len(legal_actions) - 30} 个动作")

                while True:
                    choice = input("\n请选择动作编号 (或输入 'q' 退出): ")
                    if choice.lower() == 'q':
                        print("退出游戏")
                        return
                    try:
                        idx = int(choice)
                    except ValueError:
                        print("请输入数字")
                        continue
                    if 0 <= idx < len(legal_actions):
                        action = legal_actions[idx]
                        break
                    print("无效选择，请重试")
            else:
                action = env.sample_action()
                print(f"\nPlayer {player}: {env.state.action_to_string(player, action)}")
                time.sleep(args.delay)

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated

        print("\n" + "=" * 60)
        print(env.state)
        returns = info["returns"]
        if returns[human] > 0:
            print("恭喜你赢了!")
        elif returns[human] < 0:
            print("你输了!")
        else:
            print("流局")
        print("=" * 60)


def main():
    args = parse_args()

    if args.mode == "watch":
        watch_game(args)
    elif args.mode == "play":
        play_game(args)


if __name__ == "__main__":
    main()
