"""
Shell completion scripts generated from the argparse parser.

    brownhttpd --completions bash > /etc/bash_completion.d/brownhttpd
    brownhttpd --completions zsh  > ~/.zfunc/_brownhttpd
    brownhttpd --completions fish > ~/.config/fish/completions/brownhttpd.fish

The scripts are derived from the parser's actions, so a new flag shows up
in all three shells without touching this module.
"""

import argparse
from dataclasses import dataclass
from typing import List, Optional, Sequence


SHELLS = ("bash", "zsh", "fish")


@dataclass
class Option:
    """A command-line option, flattened for script generation."""
    short: List[str]
    long: List[str]
    help: str
    takes_value: bool
    metavar: Optional[str]
    choices: Optional[Sequence[str]]

    @property
    def flags(self) -> List[str]:
        return self.short + self.long


def collect_options(parser: argparse.ArgumentParser) -> List[Option]:
    options = []
    for action in parser._actions:
        if not action.option_strings:
            continue  # positional
        options.append(Option(
            short=[s for s in action.option_strings if not s.startswith("--")],
            long=[s for s in action.option_strings if s.startswith("--")],
            help=action.help or "",
            takes_value=action.nargs != 0,
            metavar=action.metavar or action.dest.upper(),
            choices=[str(c) for c in action.choices] if action.choices else None,
        ))
    return options


def bash_script(parser: argparse.ArgumentParser, prog: str) -> str:
    options = collect_options(parser)
    func = "_" + prog.replace("-", "_")
    words = " ".join(flag for opt in options for flag in opt.flags)

    cases = []
    for opt in options:
        if not opt.takes_value:
            continue
        pattern = "|".join(opt.flags)
        if opt.choices:
            reply = f'COMPREPLY=($(compgen -W "{" ".join(opt.choices)}" -- "$cur"))'
        else:
            reply = "COMPREPLY=()"
        cases.append(
            f"        {pattern})\n"
            f"            {reply}\n"
            f"            return 0\n"
            f"            ;;\n"
        )

    return (
        f"{func}() {{\n"
        f"    local cur prev\n"
        f'    cur="${{COMP_WORDS[COMP_CWORD]}}"\n'
        f'    prev="${{COMP_WORDS[COMP_CWORD-1]}}"\n'
        f'    case "$prev" in\n'
        f"{''.join(cases)}"
        f"    esac\n"
        f'    if [[ "$cur" == -* ]]; then\n'
        f'        COMPREPLY=($(compgen -W "{words}" -- "$cur"))\n'
        f"        return 0\n"
        f"    fi\n"
        f'    COMPREPLY=($(compgen -d -- "$cur"))\n'
        f"}}\n"
        f"complete -F {func} {prog}\n"
    )


def _zsh_escape(text: str) -> str:
    return (text.replace("'", "'\\''")
                .replace("[", "\\[")
                .replace("]", "\\]")
                .replace(":", "\\:"))


def zsh_script(parser: argparse.ArgumentParser, prog: str) -> str:
    lines = []
    for opt in collect_options(parser):
        exclusive = " ".join(opt.flags)
        if len(opt.flags) > 1:
            names = "{" + ",".join(opt.flags) + "}"
        else:
            names = opt.flags[0]

        spec = f"'({exclusive})'{names}'[{_zsh_escape(opt.help)}]"
        if opt.takes_value:
            action = f"({' '.join(opt.choices)})" if opt.choices else " "
            spec += f":{opt.metavar}:{action}"
        lines.append(spec + "'")

    lines.append("'::PATH:_directories'")
    body = " \\\n    ".join(lines)
    return f"#compdef {prog}\n\n_arguments -s \\\n    {body}\n"


def fish_script(parser: argparse.ArgumentParser, prog: str) -> str:
    lines = []
    for opt in collect_options(parser):
        parts = [f"complete -c {prog}"]
        parts += [f"-s {s.lstrip('-')}" for s in opt.short]
        parts += [f"-l {s[2:]}" for s in opt.long]
        if opt.choices:
            parts.append(f"-x -a '{' '.join(opt.choices)}'")
        elif opt.takes_value:
            parts.append("-r")
        help_text = opt.help.replace("'", "\\'")
        parts.append(f"-d '{help_text}'")
        lines.append(" ".join(parts))

    lines.append(f"complete -c {prog} -f -a '(__fish_complete_directories)'")
    return "\n".join(lines) + "\n"


def generate(shell: str, parser: argparse.ArgumentParser, prog: str) -> str:
    """
    Completion script for `shell`.

    Raises:
        ValueError: For a shell other than bash, zsh or fish.
    """
    if shell == "bash":
        return bash_script(parser, prog)
    if shell == "zsh":
        return zsh_script(parser, prog)
    if shell == "fish":
        return fish_script(parser, prog)
    raise ValueError(f"Unknown shell '{shell}'!")
