"""``python -m deepseek_agent`` entrypoint."""

from deepseek_agent.cli import main

main()
