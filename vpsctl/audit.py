import json
import logging
import datetime
from typing import List, Optional
from colorama import Fore

from . import console
from .checks import PROBES
from .models import AuditOutcome, ProbeStatus
from .session import RemoteSession

logger = logging.getLogger("vpsctl.audit")

class Auditor:
    """
    Runs the remote security probes against one host and keeps the tally.
    Connectivity is checked first and is fatal; every later probe is isolated
    so one broken probe never hides the others.
    """

    def __init__(self, session: RemoteSession, probes: Optional[List] = None):
        self.session = session
        self.probes = probes if probes is not None else PROBES
        self.outcome = AuditOutcome()

    def passed(self, message: str):
        console.ok(message)
        self.outcome.record(ProbeStatus.PASS, message)

    def failed(self, message: str):
        console.fail(message)
        self.outcome.record(ProbeStatus.FAIL, message)

    def warned(self, message: str):
        console.warn(message)
        self.outcome.record(ProbeStatus.WARN, message)

    def check_connectivity(self) -> bool:
        console.info("Testing SSH connectivity...")
        if self.session.check_connection():
            self.passed("SSH connection successful")
            return True
        self.failed(f"Cannot SSH into {self.session.target}")
        return False

    def run_probe(self, probe):
        console.info(f"Checking {probe.NAME}...")
        try:
            probe.run(self)
        except Exception as e:
            logger.debug("Probe %s raised: %s", probe.NAME, e, exc_info=True)
            self.outcome.record(probe.ERROR_STATUS, probe.ERROR_MESSAGE)
            if probe.ERROR_STATUS == ProbeStatus.FAIL:
                console.fail(probe.ERROR_MESSAGE)
            else:
                console.warn(probe.ERROR_MESSAGE)
        console.blank()

    def run(self) -> int:
        """Run connectivity plus every probe. Returns the process exit code."""
        console.info(f"Auditing {self.session.target}")
        console.blank()

        if not self.check_connectivity():
            return 1
        console.blank()

        for probe in self.probes:
            self.run_probe(probe)

        return self.print_summary()

    def print_summary(self) -> int:
        out = self.outcome
        console.separator()
        console.summary("Security audit completed")
        console.separator()
        console.raw(f"✔ Passed:  {out.passed_count}")
        console.raw(f"✗ Failed:  {out.failed_count}")
        console.raw(f"⚠ Warnings: {out.warned_count}")
        console.blank()

        if out.passed_messages:
            console.section("PASSED", Fore.GREEN)
            for item in out.passed_messages:
                console.checkmark(item)
            console.blank()

        if out.failed_messages:
            console.section("FAILURES", Fore.RED)
            for item in out.failed_messages:
                console.cross(item)
            console.blank()

        if out.warned_messages:
            console.section("WARNINGS", Fore.YELLOW)
            for item in out.warned_messages:
                console.warning_mark(item)
            console.blank()

        verdict = out.verdict
        if verdict == ProbeStatus.PASS:
            console.success("All security checks passed!")
        elif verdict == ProbeStatus.WARN:
            console.info("All critical checks passed, but some warnings to review.")
        else:
            console.alert("Some security checks failed. Please review and fix.")
        return out.exit_code

    def write_json_report(self, output_path: str):
        report = self.outcome.to_dict()
        report["target"] = self.session.target
        report["generated_at"] = datetime.datetime.now(datetime.timezone.utc).isoformat()

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2)
            console.info(f"JSON report written to: {output_path}")
        except OSError as e:
            console.error(f"Failed to write JSON report: {e}")
