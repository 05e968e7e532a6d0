# Log system for the launcher
import os
import sys
import faulthandler
import traceback
import datetime

LOG_DIR = os.environ.get("EASYHTUI_LOG_DIR", "/tmp")
LOGFILE = os.path.join(LOG_DIR, "easyhtui.log")
CRASHFILE = os.path.join(LOG_DIR, "easyhtui-crash.log")
# Activate for some verbose message on tricky parts of the code
DEBUG = os.environ.get('EASYHTUI_DEBUG', '').lower() in ('1', 'true', 'yes')

crash_file = None

# Global hook for uncaught Python exceptions
def global_excepthook(exc_type, exc_value, exc_tb):
    traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.stderr)
    if crash_file is None:
        return
    crash_file.write("Uncaught Python exception:\n")
    traceback.print_exception(exc_type, exc_value, exc_tb, file=crash_file)
    crash_file.flush()

def install_crash_handler(path: str = CRASHFILE):
    """One file for all crash info: hard crashes and uncaught exceptions."""
    global crash_file
    if crash_file is not None:
        return
    crash_file = open(path, "a")
    faulthandler.enable(file=crash_file, all_threads=True)
    sys.excepthook = global_excepthook

def debug_print(msg: str):
    if DEBUG:
        ts = datetime.datetime.now().strftime("%m/%d %H:%M:%S")
        with open(LOGFILE, "a") as f:
            f.write(f"[{ts}] {msg} \n")
