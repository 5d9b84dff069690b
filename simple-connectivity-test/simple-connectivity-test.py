import os
import sys, pathlib
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from memos_cloud import MemosClient, MemosError, build_settings, format_context_block
from memos_cloud.plugins.memos.payloads import build_search_payload

# === Prompt (can be overridden with --prompt) ===
DEFAULT_PROMPT = "What do you remember about my preferences?"

# Verbosity toggle (set VERBOSE=0 for quiet mode)
VERBOSE = os.environ.get("VERBOSE", "1") not in ("0", "false", "False")


def main():
	import argparse
	parser = argparse.ArgumentParser(description="Simple MemOS Cloud connectivity + recall check")
	parser.add_argument("--env-file", default=".env", help="Path to .env file with MEMOS_* settings")
	parser.add_argument("--prompt", default=DEFAULT_PROMPT, help="Query text to search with")
	parser.add_argument("--user-id", default=None, help="Override MEMOS_USER_ID")
	args = parser.parse_args()

	# Load env file into the process environment (MEMOS_* keys win over ~/.openclaw/.env)
	load_dotenv(args.env_file)

	config = {"userId": args.user_id} if args.user_id else {}
	settings = build_settings(config)

	if VERBOSE:
		print("[connectivity] Resolved settings:")
		for key, value in settings.to_dict(redact=True).items():
			print(f"  {key}: {value}")

	# Mandatory settings. Fail fast if missing.
	missing = settings.missing_credentials()
	if missing:
		raise RuntimeError(f"Missing mandatory settings in {args.env_file}: {', '.join(missing)}")

	client = MemosClient(settings)
	payload = build_search_payload(settings, args.prompt)

	try:
		result = client.search_memory(payload)
	except MemosError as exc:
		print(f"[connectivity] Search failed: {exc}")
		return 1

	block = format_context_block(result)
	if block:
		print("\n=== Recalled Context ===")
		print(block)
	else:
		print("\n(no memories matched)")
	return 0


if __name__ == "__main__":
	sys.exit(main())
