"""
Command line entry point for netfix.
"""

import argparse
import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from netfix import VERSION
from netfix.config import load_settings
from netfix.device import AndroidDeviceState, DeviceState
from netfix.diagnostics import CheckRegistry, DiagnosticEngine
from netfix.display import ColorManager, Colors
from netfix.executor import CommandExecutor
from netfix.inspector import StateInspector
from netfix.models import MANUAL_RESET_PHRASE, DiagnosisReport, LogEvent, NetworkKind, RunResult
from netfix.privilege import PrivilegeResolver
from netfix.probe import ConnectivityProber
from netfix.runner import RemediationRunner


class NetFix:
    """Wires the engine components together for one CLI invocation"""

    def __init__(self, verbose: bool = False, no_color: bool = False,
                 skip_checks: Optional[List[str]] = None, config_file: Optional[str] = None,
                 device: Optional[DeviceState] = None):
        self.verbose = verbose
        self.logger = self._setup_logging()
        self.settings = load_settings(config_file, self.logger)

        self.color_manager = ColorManager()
        if no_color:
            self.color_manager.set_colors_enabled(False)

        self.device = device or AndroidDeviceState(timeout=self.settings.command_timeout,
                                                   logger=self.logger)
        self.privilege = PrivilegeResolver.from_settings(self.settings, self.logger)
        self.executor = CommandExecutor.from_settings(self.settings, self.privilege, self.logger)
        self.prober = ConnectivityProber.from_settings(self.settings, self.logger)
        self.inspector = StateInspector(self.device, self.executor, self.settings, self.logger)

        self.registry = CheckRegistry(self.logger)
        self.registry.load_checks()
        for name in skip_checks or []:
            self.registry.disable_check(name)

        self.engine = DiagnosticEngine(self.privilege, self.prober, self.inspector, self.executor,
                                       self.device, self.settings, self.registry, self.logger)
        self.runner = RemediationRunner(self.engine, self.executor, self.prober, self.inspector,
                                        self.device, self.settings, self.logger)

    def _setup_logging(self) -> logging.Logger:
        """Configure logging"""
        logger = logging.getLogger('netfix')
        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
            logger.addHandler(handler)

        return logger

    def resolve_kind(self, network: str) -> NetworkKind:
        if network == 'auto':
            kind = self.inspector.active_network_kind()
            self.logger.info(f"Active network: {kind.label}")
            return kind
        return NetworkKind(network)

    def _in_worker(self, func, kind: NetworkKind):
        """Run an operation off the main thread so Ctrl-C can cancel it"""
        cancel = threading.Event()
        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(func, kind, cancel)
            try:
                return future.result()
            except KeyboardInterrupt:
                cancel.set()
                print(self.color_manager.color(Colors.YELLOW, "\nCancelling, waiting for the current step..."))
                return future.result()

    def diagnose(self, kind: NetworkKind) -> DiagnosisReport:
        return self._in_worker(lambda k, cancel: self.engine.diagnose(k, cancel=cancel), kind)

    def reset(self, kind: NetworkKind) -> RunResult:
        return self._in_worker(self.runner.run, kind)

    def print_events(self, events: List[LogEvent]):
        for event in events:
            print(self.color_manager.render(event))

        if any(MANUAL_RESET_PHRASE in event.text for event in events):
            hint = "Run 'netfix --open-settings' to open the wireless settings screen"
            print(f"\n{self.color_manager.color(Colors.CYAN, hint)}")

    def print_state(self):
        print(self.color_manager.color(Colors.BOLD, "Network State:"))
        print(self.inspector.describe_state(), end='')

    def list_checks(self):
        """List available diagnostic checks"""
        print(self.color_manager.color(Colors.BOLD, "Diagnostic checks (in run order):"))
        for name in self.registry.get_available_checks():
            module = self.registry.checks[name]
            enabled = name not in self.registry.disabled_checks
            status = self.color_manager.color(Colors.BRIGHT_GREEN, "enabled") if enabled \
                else self.color_manager.color(Colors.YELLOW, "disabled")
            root = " (root)" if getattr(module, 'REQUIRES_ROOT', False) else ""
            kinds = ', '.join(kind.label for kind in getattr(module, 'KINDS', ()))
            print(f"  {name:<14} {status:<10} {kinds}{root}")


def events_to_json(operation: str, kind: NetworkKind, events: List[LogEvent],
                   issues=None, outcome: Optional[str] = None) -> str:
    data = {
        'operation': operation,
        'network': kind.value,
        'outcome': outcome,
        'issues': [
            {'description': issue.description,
             'category': issue.category.value if issue.category else None}
            for issue in (issues or [])
        ],
        'events': [{'text': event.text, 'severity': event.severity.value} for event in events],
    }
    return json.dumps(data, indent=2)


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    parser = argparse.ArgumentParser(
        prog='netfix',
        description="Diagnose and repair Wi-Fi or mobile data connectivity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --diagnose                 # Diagnose the active network
  %(prog)s --reset --network wifi     # Run the Wi-Fi remediation plan
  %(prog)s --reset --network mobile   # Reset mobile data
  %(prog)s --state                    # Show Wi-Fi / mobile / VPN state
  %(prog)s --list-checks              # List diagnostic checks
  %(prog)s --skip-check firewall      # Skip a specific check
  %(prog)s --config netfix.yaml       # Use custom configuration file
        """
    )

    parser.add_argument('--diagnose', action='store_true', help='Diagnose network issues')
    parser.add_argument('--reset', action='store_true', help='Diagnose and attempt to repair the network')
    parser.add_argument('--state', action='store_true', help='Show current network state')
    parser.add_argument('--list-checks', action='store_true', help='List diagnostic checks')
    parser.add_argument('--open-settings', action='store_true', help='Open the wireless settings screen')
    parser.add_argument('--network', choices=['auto', 'wifi', 'mobile'], default='auto',
                        help='Network to operate on (default: active network)')
    parser.add_argument('--skip-check', action='append', dest='skip_checks',
                        help='Skip a diagnostic check (can be used multiple times)')
    parser.add_argument('--config', help='Path to configuration YAML file')
    parser.add_argument('--output', '-o', help='Write the event log as JSON to this file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')
    parser.add_argument('--version', action='version', version=f'netfix v{VERSION}')

    args = parser.parse_args(argv)

    if not any([args.diagnose, args.reset, args.state, args.list_checks, args.open_settings]):
        args.diagnose = True

    app = NetFix(verbose=args.verbose, no_color=args.no_color,
                 skip_checks=args.skip_checks, config_file=args.config)

    try:
        if args.list_checks:
            app.list_checks()
            return

        if args.open_settings:
            if not app.device.open_network_settings():
                print(app.color_manager.color(Colors.YELLOW, "Could not open settings; please reset network manually"))
            return

        if args.state:
            app.print_state()
            return

        kind = app.resolve_kind(args.network)

        if args.reset:
            result = app.reset(kind)
            app.print_events(result.events)
            json_data = events_to_json('reset', kind, result.events, outcome=result.outcome.value)
        else:
            report = app.diagnose(kind)
            app.print_events(report.events)
            json_data = events_to_json('diagnose', kind, report.events, issues=report.issues)

        if args.output:
            with open(args.output, 'w') as f:
                f.write(json_data)
            print(f"\nResults exported to {args.output}")

    except KeyboardInterrupt:
        print(f"\n{app.color_manager.color(Colors.YELLOW, 'Operation cancelled by user')}")
        sys.exit(1)
    except Exception as e:
        print(f"\n{app.color_manager.color(Colors.RED, f'Error: {e}')}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
