"""Version information for i18n-extractor."""

__version__ = "0.4.0"
__author__ = "i18n-extractor contributors"
__description__ = "Extract UI strings from Rust and Python sources into a key registry and maintain language packs"

# Changelog:
# 0.4.0 - Menu scan/replace pipeline
#       - New 'scan-app-menus' command with separate scan and replace steps
#       - Replace is all or nothing and a no-op on an already replaced file
#       - Import line added when the first replacement happens
#
# 0.3.0 - Language packs
#       - New 'new' command scaffolds pack.yml, translation.json and README
#       - 'validate' checks key sets, key format, value types and placeholders
#       - 'reorganize' puts translations in registry order and moves removed
#         keys to the "__obsolete__" section instead of dropping them
#       - JSON validation report (--json)
#
# 0.2.0 - Literal candidates
#       - Configurable literal classifier (ignore calls, UI calls and fields,
#         exclusion patterns, confidence threshold)
#       - Derived keys <prefix>.<category>.<slug> with numeric suffixes
#       - Python adapter next to the Rust one
#
# 0.1.0 - Initial release
#       - 'scan' collects t!() keys and default texts into defaults.yml
#       - Files are scanned on a thread pool, findings sorted by file and line
#       - Atomic writes for every generated file
