# colorblind_theme/cli.py
"""
CLI Interface for the Colorblind Theme host.
Opens projects, inspects loaded plugins and themes, resolves localized
messages and reads configuration values.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .core.application import HostApplication
from .core.error_handling import ColorblindThemeError
from .plugin import ColorblindThemePlugin


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="colorblind-theme",
            description="Colorblind Theme — color-blind friendly themes and their project hooks",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  colorblind-theme open my-project                 # Open a project, log the greeting
  colorblind-theme --locale de open demo --reopen  # Close and reopen once
  colorblind-theme plugins --json                  # List loaded plugins
  colorblind-theme message projectService demo     # Print a localized message
  colorblind-theme config get i18n.locale          # Read a configuration value
            """
        )
        self._setup_arguments()
        self.args: Optional[argparse.Namespace] = None
        self.logger = logging.getLogger("CLI")

    def _setup_arguments(self):
        """Configure CLI argument parser."""
        self.parser.add_argument("--config-dir", default="config", help="Configuration directory (default: config)")
        self.parser.add_argument("--profile", default=None, help="Configuration profile")
        self.parser.add_argument("--locale", default=None, help="Override i18n.locale (e.g. de, zh_CN)")
        self.parser.add_argument("--debug", action="store_true", help="Enable debug logging")

        subparsers = self.parser.add_subparsers(dest="command", help="Available commands")

        # === OPEN ===
        open_parser = subparsers.add_parser("open", help="Open one or more projects")
        open_parser.add_argument("names", nargs="+", metavar="NAME", help="Project display name")
        open_parser.add_argument("--reopen", action="store_true", help="Close and reopen each project once")

        # === PLUGINS ===
        plugins_parser = subparsers.add_parser("plugins", help="List loaded plugins")
        plugins_parser.add_argument("--json", action="store_true", help="Output in JSON format")

        # === MESSAGE ===
        message_parser = subparsers.add_parser("message", help="Print a localized message")
        message_parser.add_argument("key", help="Message key (e.g. 'projectService')")
        message_parser.add_argument("params", nargs="*", help="Message parameters {0}, {1}, ...")
        message_parser.add_argument(
            "--plugin", default=ColorblindThemePlugin.PLUGIN_ID, help="Plugin whose bundle is used"
        )

        # === THEME ===
        theme_parser = subparsers.add_parser("theme", help="Show the active theme")
        theme_parser.add_argument("--json", action="store_true", help="Output in JSON format")

        # === CONFIG ===
        config_parser = subparsers.add_parser("config", help="Inspect configuration")
        config_sub = config_parser.add_subparsers(dest="config_action")
        config_sub.required = True
        get_parser = config_sub.add_parser("get", help="Get config value")
        get_parser.add_argument("key", help="Configuration key (e.g., 'i18n.locale', 'host.build')")

    def _build_host(self) -> HostApplication:
        host = HostApplication(
            config_dir=self.args.config_dir,
            profile=self.args.profile,
            locale=self.args.locale,
            debug=self.args.debug,
            log_stream=sys.stderr,
        )
        return host.start()

    def _run_open(self, host: HostApplication) -> None:
        manager = host.project_manager
        for name in self.args.names:
            project = manager.open_project(name)
            if self.args.reopen:
                manager.close_project(project)
                manager.open_project(name)
        print(f"Opened {len(manager.open_projects())} project(s)")

    def _run_plugins(self, host: HostApplication) -> None:
        plugins = host.plugin_manager
        infos = [plugins.get_plugin_info(plugin_id) for plugin_id in plugins.list_active_plugins()]
        if self.args.json:
            print(json.dumps(infos, indent=2, ensure_ascii=False))
            return
        if not infos:
            print("No plugins loaded")
        for info in infos:
            print(f"{info['id']}  {info['name']} v{info['version']}")

    def _run_message(self, host: HostApplication) -> None:
        bundle = host.plugin_manager.get_bundle(self.args.plugin)
        if bundle is None:
            raise KeyError(f"Plugin '{self.args.plugin}' is not loaded or has no resource bundle")
        print(bundle.message(self.args.key, *self.args.params))

    def _run_theme(self, host: HostApplication) -> None:
        theme = host.themes.active_theme()
        if self.args.json:
            print(json.dumps(theme, indent=2, ensure_ascii=False))
            return
        if theme is None:
            print("No active theme")
            return
        print(f"{theme['id']}  {theme['name']} ({'dark' if theme['dark'] else 'light'})")

    def _run_config(self, host: HostApplication) -> None:
        print(json.dumps(host.config.get(self.args.key), ensure_ascii=False))

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parse arguments and execute the command. Returns the exit code."""
        self.args = self.parser.parse_args(argv)
        if not self.args.command:
            self.parser.print_help()
            return 1

        handler = getattr(self, f"_run_{self.args.command}")
        host = None
        try:
            host = self._build_host()
            handler(host)
        except (ColorblindThemeError, KeyError) as e:
            message = e.args[0] if type(e) is KeyError and e.args else str(e)
            print(f"Error: {message}", file=sys.stderr)
            return 1
        finally:
            if host is not None:
                host.shutdown()
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    return CLIApplication().run(argv)


if __name__ == "__main__":
    sys.exit(main())
