from daycycle.actions.base import Action
from daycycle.actions.command import CommandAction
from daycycle.actions.log import LogAction

__all__ = ["Action", "CommandAction", "LogAction"]
