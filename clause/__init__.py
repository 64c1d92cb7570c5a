
from clause.args import (Arg,
                         ArgBuilder,
                         BoundArguments,
                         arg,
                         int_arg,
                         float_arg,
                         bind_args,
                         validate_arg_defs,
                         get_max_arg_count)

from clause.errors import (ClauseException,
                           DefinitionError,
                           ArgumentParseError,
                           InvalidChoice,
                           MissingRequiredArguments,
                           UnexpectedArguments,
                           UnknownFlag,
                           DuplicateFlag,
                           InvalidSubcommand,
                           InvalidFlagArgument,
                           MissingRequiredFlags,
                           ControlSignal,
                           VersionSignal,
                           HelpSignal,
                           CommandLineError)

from clause.utils import ERROR
from clause.parser import Flag, FlagDisplay, FlagParser, FlagParseResult
from clause.context import Context, Dirs
from clause.command import Command, command, handle_error
from clause.helpers import HelpHandler
