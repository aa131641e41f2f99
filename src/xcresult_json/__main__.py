"""Allow running xcresult_json as a module: python -m xcresult_json."""

from xcresult_json.cli import main

if __name__ == "__main__":
    main()
