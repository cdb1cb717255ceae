"""How many compiler probes to run at once.

Every probe is a separate compiler process.  CompilerCache limits them to
--jobs, which defaults to the CPUs this process may run on.
"""

import os
import platform
import subprocess


def _determine_system():
    system = platform.system().lower()
    if platform.system() == "Linux":
        try:
            # A Termux fingerprint is that it
            # doesn't have permissions for /proc/stat
            os.stat("/proc/stat")
        except PermissionError:
            system = "termux"
    return system


def _cpus_linux():
    import psutil

    thisprocess = psutil.Process()
    return len(thisprocess.cpu_affinity())


def _cpus_termux():
    # Termux can't import psutil without double exceptions
    return int(
        subprocess.run(
            ["nproc"],
            stdout=subprocess.PIPE,
            universal_newlines=True,
        ).stdout.rstrip()
    )


def _cpus_darwin():
    # psutil has no cpu_affinity on Darwin
    return int(
        subprocess.run(
            ["sysctl", "-n", "hw.ncpu"],
            stdout=subprocess.PIPE,
            universal_newlines=True,
        ).stdout.rstrip()
    )


def cpu_count():
    """ How many compiler probes may run at the same time """
    try:
        cpu_func = globals()["_".join(["_cpus", _determine_system()])]
        return cpu_func()
    except (KeyError, ValueError, OSError):
        # A safe-ish default even for phones
        return 4


def add_arguments(cap):
    cap.add(
        "-j",
        "--jobs",
        dest="jobs",
        type=int,
        default=cpu_count(),
        help="Sets the number of compilers to probe in parallel.  Defaults to the usable CPU count.",
    )
