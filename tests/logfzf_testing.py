import io
import sys
from types import SimpleNamespace

from logfzf.logfzf import LogFzfApplication


class TerminalInput(io.StringIO):
    """Stand-in for an interactive stdin, which logfzf must not read from."""
    def isatty(self) -> bool:
        return True


class ScriptedSelector:
    """
    Replaces the interactive selector: each run() returns the next scripted index,
    then None (as if the user quit).
    """
    calls = []
    return_code = 0

    def __init__(self, records, display, preview, detector, initial_query=""):
        self.records = records
        self.display = display
        self.preview = preview
        self.query_text = initial_query
        self.calls.append(self)

    def run(self):
        answers = type(self).answers
        return answers.pop(0) if answers else None


def scripted_selector(*answers):
    return type("ScriptedSelectorRun", (ScriptedSelector,), {"answers": list(answers), "calls": []})


class CrashingSelector(ScriptedSelector):
    """Behaves like a textual app that died with an unhandled exception."""
    answers = []
    return_code = 1


class LogFzfTestApp:
    def __init__(self, input_files=(), stdin=None, selector=None, **kwargs):
        if isinstance(input_files, str):
            input_files = [input_files]

        args = dict(
            files=list(input_files),
            command=[],
            temp_file="tmp",
            temp_dir="/tmp",
            editor="less",
            before=None,
            after=None,
            ago=None,
            skip_column=0,
            limit=10000,
            encoding="UTF-8",
            timestamp_formats=[],
            list=False,
            csv=None,
            verbose=False,
        )
        args.update(kwargs)
        self.args = SimpleNamespace(**args)
        self.app = LogFzfApplication(self.args, stdin=stdin if stdin is not None else TerminalInput())  # noqa
        self.app.selector_class = selector or scripted_selector()

    def __call__(self) -> LogFzfApplication:
        self.app.run()
        return self.app


if __name__ == '__main__':
    from pprint import pprint
    app = LogFzfTestApp(sys.argv[1:])()
    pprint([(rec.timestamp, rec.source_id, rec.start_line, rec.content) for rec in app.records], width=200)
