# config package: authoritative defaults for the trial summarizer.
#
# Sub-modules:
#   api_config.py     : Anthropic endpoint, model identifier, auth, retry constants
#   summary_params.py : per-field call parameters and trial CSV column layout
#
# Prompt templates are plain text files in config/prompts/:
#   short_summary_template.txt
#   long_summary_template.txt
#
# Any value here can be overridden per run from the JSON settings file
# (see src/summarizer/settings.py).
