"""
src/summarizer: Resumable batch summarization of clinical trial records.

Module layout
-------------
config.py        : path constants, CSV layout, failure marker
exceptions.py    : FormatError, ConfigError
settings.py      : settings file / env / defaults resolution, prompt rendering
records.py       : trial CSV load and save
resume.py        : completion status, row selection, resume planning
batch.py         : per-record summarization, failure isolation, assembly
progress.py      : console progress and outcome reporting
pipeline.py      : end-to-end run (load → plan → summarize → write)
logging_setup.py : per-run text and JSON log files
cli.py           : command-line entry point

Public interface
----------------
Run a batch:
    settings = load_settings()
    with ClaudeClient(settings["api"]) as client:
        run_summarization(input_path, output_path, settings, client, resume=True)
"""

from .batch import assemble_output, process_records, summarize_record
from .exceptions import ConfigError, FormatError
from .pipeline import run_summarization
from .records import load_input, load_prior_output, save_records
from .resume import RecordStatus, infer_status, is_complete, plan_resume, select_rows
from .settings import load_settings, render_prompt

__all__ = [
    # Pipeline
    "run_summarization",
    # Settings
    "load_settings",
    "render_prompt",
    # Records
    "load_input",
    "load_prior_output",
    "save_records",
    # Resume planning
    "RecordStatus",
    "infer_status",
    "is_complete",
    "plan_resume",
    "select_rows",
    # Batch
    "summarize_record",
    "process_records",
    "assemble_output",
    # Errors
    "FormatError",
    "ConfigError",
]
