"""
Configuration system for the sub-command router
Supports YAML files, CLI overrides, and programmatic access
"""

import argparse
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from subcommand_router.formatting import CommandError, Style


@dataclass
class RouterSection:
    """Which top-level commands exist and how empty input is routed"""
    parents: List[str] = field(default_factory=list)  # empty = accept any parent
    default_subcommand: str = "help"
    register_help: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parents': list(self.parents),
            'default_subcommand': self.default_subcommand,
            'register_help': self.register_help
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RouterSection':
        return cls(
            parents=[str(p) for p in data.get('parents', []) or []],
            default_subcommand=data.get('default_subcommand', 'help'),
            register_help=data.get('register_help', True)
        )


@dataclass
class HelpSection:
    """Help listing configuration"""
    commands_per_page: int = 9
    show_aliases: bool = True
    hide_unpermitted: bool = True
    header: Optional[str] = None  # "%page%" becomes "page/total"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'commands_per_page': self.commands_per_page,
            'show_aliases': self.show_aliases,
            'hide_unpermitted': self.hide_unpermitted,
            'header': self.header
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HelpSection':
        return cls(
            commands_per_page=data.get('commands_per_page', 9),
            show_aliases=data.get('show_aliases', True),
            hide_unpermitted=data.get('hide_unpermitted', True),
            header=data.get('header')
        )


@dataclass
class StyleSection:
    """Terminal styling: ANSI codes per style role"""
    color: bool = True
    codes: Dict[str, str] = field(default_factory=dict)  # role name -> code

    def to_dict(self) -> Dict[str, Any]:
        return {
            'color': self.color,
            'codes': dict(self.codes)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StyleSection':
        return cls(
            color=data.get('color', True),
            codes=dict(data.get('codes', {}) or {})
        )


@dataclass
class ConsoleSection:
    """Console messages logging level configuration"""
    verbose: bool = False
    quiet: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'verbose': self.verbose,
            'quiet': self.quiet
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConsoleSection':
        return cls(
            verbose=data.get('verbose', False),
            quiet=data.get('quiet', False)
        )


@dataclass
class RouterConfig:
    """Complete router configuration"""
    router: RouterSection = field(default_factory=RouterSection)
    help: HelpSection = field(default_factory=HelpSection)
    messages: Dict[str, str] = field(default_factory=dict)  # CommandError key -> text
    styles: StyleSection = field(default_factory=StyleSection)
    console: ConsoleSection = field(default_factory=ConsoleSection)

    # Metadata
    config_version: str = "1.0"
    description: str = "Sub-command router configuration"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        return {
            'config_version': self.config_version,
            'description': self.description,
            'router': self.router.to_dict(),
            'help': self.help.to_dict(),
            'messages': dict(self.messages),
            'styles': self.styles.to_dict(),
            'console': self.console.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RouterConfig':
        """Create from dictionary (YAML loading). Missing sections get defaults."""
        return cls(
            router=RouterSection.from_dict(data.get('router', {}) or {}),
            help=HelpSection.from_dict(data.get('help', {}) or {}),
            messages={str(k): str(v) for k, v in (data.get('messages', {}) or {}).items()},
            styles=StyleSection.from_dict(data.get('styles', {}) or {}),
            console=ConsoleSection.from_dict(data.get('console', {}) or {}),
            config_version=str(data.get('config_version', '1.0')),
            description=data.get('description', 'Sub-command router configuration')
        )


class ConfigurationManager:
    """
    Manages configuration loading, merging, and validation
    """

    def __init__(self, config_file: str = "subcommand_router.yaml"):
        self.config_file = config_file
        self.config = RouterConfig()
        self.config_file_path: Optional[Path] = None

        self.logger = logging.getLogger(__name__)

        # Standard config file locations (in order of preference)
        self.config_search_paths = [
            Path.cwd() / config_file,  # Current directory
            Path.cwd() / "config" / config_file,  # Config subdirectory
            Path.home() / ".config" / "subcommand_router" / "config.yaml",  # User config
        ]

    def load_config(self, config_file: Optional[str] = None) -> RouterConfig:
        """
        Load configuration from file with fallback chain

        Args:
            config_file: Specific config file path, or None for auto-discovery

        Returns:
            Loaded configuration object (defaults if nothing was found)
        """
        if config_file:
            config_path = Path(config_file)
            if config_path.exists():
                self.config = self._load_yaml_file(config_path)
                self.config_file_path = config_path
                self.logger.info(f"Loaded config from: {config_path}")
            else:
                self.logger.warning(f"Config file not found: {config_path}")
                self.logger.info("Using default configuration")
        else:
            for path in self.config_search_paths:
                if path.exists():
                    self.config = self._load_yaml_file(path)
                    self.config_file_path = path
                    self.logger.info(f"Auto-discovered config: {path}")
                    break
            else:
                self.logger.info("No config file found, using defaults")

        return self.config

    def _load_yaml_file(self, file_path: Path) -> RouterConfig:
        """Load configuration from YAML file"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                yaml_data = yaml.safe_load(f) or {}

            if not isinstance(yaml_data, dict):
                self.logger.error(f"Config file {file_path} does not contain a mapping")
                return RouterConfig()

            known = set(RouterConfig().to_dict())
            for key in yaml_data:
                if key not in known:
                    self.logger.warning(f"Unknown config key '{key}' in {file_path}")

            return RouterConfig.from_dict(yaml_data)

        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Error loading config file {file_path}: {e}")
            return RouterConfig()

    def merge_cli_args(self, args: argparse.Namespace) -> RouterConfig:
        """Apply command line overrides on top of the loaded config"""
        if getattr(args, 'verbose', False):
            self.config.console.verbose = True
            self.config.console.quiet = False
        if getattr(args, 'quiet', False):
            self.config.console.quiet = True
            self.config.console.verbose = False
        if getattr(args, 'no_color', False):
            self.config.styles.color = False
        for parent in getattr(args, 'parent', None) or []:
            if parent not in self.config.router.parents:
                self.config.router.parents.append(parent)
        return self.config

    def save_config(self, file_path: Optional[str] = None) -> bool:
        """Save current configuration to a YAML file"""
        if file_path:
            target_path = Path(file_path)
        elif self.config_file_path:
            target_path = self.config_file_path
        else:
            target_path = Path(self.config_file)

        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            with open(target_path, 'w', encoding='utf-8') as f:
                yaml.dump(self.config.to_dict(), f, default_flow_style=False,
                          sort_keys=False, allow_unicode=True)
            self.logger.info(f"Configuration saved to: {target_path}")
            return True
        except OSError as e:
            self.logger.error(f"Error saving config to {target_path}: {e}")
            return False

    def create_sample_config(self, file_path: str = "subcommand_router_sample.yaml") -> bool:
        """Write a commented sample configuration file"""
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(self._generate_sample_yaml())
            self.logger.info(f"Sample configuration created: {file_path}")
            return True
        except OSError as e:
            self.logger.error(f"Error creating sample config {file_path}: {e}")
            return False

    def _generate_sample_yaml(self) -> str:
        return """# Sub-command router configuration
config_version: "1.0"
description: "Sub-command router configuration"

# ROUTING
router:
  # Top-level commands the host declares. Commands for any other
  # parent are refused at registration. Leave empty to accept all.
  parents:
    - team
  # Sub-command used when only the parent is typed
  default_subcommand: help
  # Register "help" / "?" under every declared parent
  register_help: true

# HELP LISTING
help:
  commands_per_page: 9
  show_aliases: true
  hide_unpermitted: true
  # %page% becomes "page/total"
  header: "--- Commands (%page%) ---"

# ERROR MESSAGES (override the defaults)
messages:
  no_permission: "You do not have permission for this command"
  too_many_arguments: "Too much input"
  too_few_arguments: "Not enough input"

# STYLING
styles:
  color: true
  codes:
    error: "\\x1b[91m"

# CONSOLE MESSAGES LOGGING LEVEL
console:
  verbose: false
  quiet: false
"""

    def validate_config(self) -> tuple[bool, list[str]]:
        """
        Validate configuration for common issues

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        for parent in self.config.router.parents:
            if not parent or parent.strip() != parent or " " in parent:
                errors.append(f"Invalid parent command name: '{parent}'")

        if len(set(self.config.router.parents)) != len(self.config.router.parents):
            errors.append("Parent command names must be unique")

        if not self.config.router.default_subcommand:
            errors.append("default_subcommand must be set")

        if self.config.help.commands_per_page < 1:
            errors.append(f"Invalid commands_per_page: {self.config.help.commands_per_page}")

        error_keys = {e.key for e in CommandError}
        for key in self.config.messages:
            if key not in error_keys:
                errors.append(f"Unknown message key: '{key}'")

        style_keys = {s.value for s in Style}
        for key in self.config.styles.codes:
            if key not in style_keys:
                errors.append(f"Unknown style role: '{key}'")

        if self.config.console.verbose and self.config.console.quiet:
            errors.append("console.verbose and console.quiet cannot both be set")

        return len(errors) == 0, errors

    def get_config(self) -> RouterConfig:
        """Get current configuration"""
        return deepcopy(self.config)


def create_argument_parser() -> argparse.ArgumentParser:
    """Command line options shared by every router front end"""
    parser = argparse.ArgumentParser(
        description="Sub-command router interactive shell",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                           # auto-discover config, defaults otherwise
  %(prog)s -c router.yaml            # use a specific config file
  %(prog)s --create-config my.yaml   # write a sample config and exit
  %(prog)s --parent team -v          # declare /team, verbose logging
"""
    )

    parser.add_argument('-c', '--config', help='Configuration file path')
    parser.add_argument('--create-config', metavar='FILE',
                        help='Create a sample configuration file and exit')
    parser.add_argument('--save-config', metavar='FILE',
                        help='Save the effective configuration to FILE')
    parser.add_argument('--parent', action='append', metavar='NAME',
                        help='Declare a top-level command (repeatable)')
    parser.add_argument('--no-color', action='store_true',
                        help='Disable ANSI styling of replies')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true',
                           help='Enable debug logging')
    verbosity.add_argument('-q', '--quiet', action='store_true',
                           help='Only log warnings and errors')

    return parser


def setup_configuration(argv=None) -> tuple[Optional[RouterConfig], bool, Optional[ConfigurationManager]]:
    """
    Setup configuration system with CLI integration

    Args:
        argv: Command line arguments (None for sys.argv)

    Returns:
        (config_object, should_exit, config_manager)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.create_config:
        manager = ConfigurationManager()
        if manager.create_sample_config(args.create_config):
            print(f"Sample configuration created: {args.create_config}")
            print(f"Edit the file and run again with: -c {args.create_config}")
        return None, True, None

    manager = ConfigurationManager()
    manager.load_config(args.config)
    config = manager.merge_cli_args(args)

    is_valid, errors = manager.validate_config()
    if not is_valid:
        print("Configuration errors:")
        for error in errors:
            print(f"  ✗ {error}")
        return None, True, None

    if args.save_config:
        if manager.save_config(args.save_config):
            print(f"Configuration saved to: {args.save_config}")

    return config, False, manager
