"""
plantree command line.

  plantree parse  <condition> [--params ...] [--replace ...] [--tree]
  plantree check  <condition> --state FILE | --redis
  plantree apply  <effect> --state FILE [--write] | --redis
  plantree state  instance|add|remove|set|load|show|clear|use ...
  plantree action <plan-line>

check and apply read facts from a .state file or from the Redis problem
state selected with --namespace (default: the active namespace).
"""

import argparse
from plantree.cli.commands import parse, evaluate, state, action


def main():
    parser = argparse.ArgumentParser(prog="plantree", description="Parse, check and apply planning conditions")
    subparsers = parser.add_subparsers(dest="command")

    for command in (parse, evaluate, state, action):
        command.add_subparser(subparsers)

    args = parser.parse_args()
    if not hasattr(args, "func"):
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
