"""
CLI Client for Project Symposium

A command-line interface for consulting engines, deliberating dilemmas and
listing the engine registry through the Symposium API.
"""

import argparse
import json
import sys
from typing import List, Optional

import httpx

# Default API URL
DEFAULT_API_URL = "http://localhost:8000"


def _request(
    method: str,
    url: str,
    payload: Optional[dict] = None,
    params: Optional[dict] = None,
    timeout: float = 30.0
) -> dict:
    try:
        response = httpx.request(method, url, json=payload, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()

    except httpx.HTTPStatusError as e:
        try:
            detail = e.response.json().get("detail", e.response.text)
        except ValueError:
            detail = e.response.text
        print(f"Error ({e.response.status_code}): {detail}")
        sys.exit(1)

    except httpx.HTTPError as e:
        print(f"Error contacting API: {e}")
        sys.exit(1)


def consult(
    question: str,
    api_url: str = DEFAULT_API_URL,
    domains: Optional[List[str]] = None,
    capabilities: Optional[List[str]] = None,
    engines: Optional[List[str]] = None,
    strategy: Optional[str] = None,
    timeout: Optional[float] = None
) -> dict:
    """
    Submit a question to the /consult endpoint.

    Args:
        question: Question text
        api_url: API base URL
        domains: Domains to consult
        capabilities: Required capabilities
        engines: Explicit engine ids
        strategy: Synthesis strategy name
        timeout: Per-engine timeout in seconds

    Returns:
        ConsultationResult dict
    """
    payload = {"question": question}
    for key, value in (
        ("domains", domains),
        ("capabilities", capabilities),
        ("engines", engines),
        ("strategy", strategy),
        ("timeout", timeout),
    ):
        if value:
            payload[key] = value

    return _request("POST", f"{api_url}/consult", payload)


def deliberate(
    dilemma: str,
    api_url: str = DEFAULT_API_URL,
    traditions: Optional[List[str]] = None
) -> dict:
    """
    Submit a dilemma to the /deliberate endpoint.

    Returns:
        DeliberationResult dict
    """
    payload = {"dilemma": dilemma}
    if traditions:
        payload["traditions"] = traditions

    return _request("POST", f"{api_url}/deliberate", payload)


def list_engines(api_url: str = DEFAULT_API_URL, domain: Optional[str] = None) -> dict:
    """List registered engines."""
    params = {"domain": domain} if domain else None
    return _request("GET", f"{api_url}/engines", params=params, timeout=10.0)


def format_output(result: dict):
    """
    Format and display a consultation or deliberation result.

    Args:
        result: Result dict returned by the API
    """
    print("\n" + "=" * 60)

    if "dilemma" in result:
        print("DELIBERATION RESULT")
        print("=" * 60)
        print(f"\nDilemma: {result['dilemma']}")

        for position in result.get("positions", []):
            print(f"\n[{position.get('tradition')}] {position['position']} ({position['confidence']:.3f})")

        if result.get("tensions"):
            print(f"\nTensions: {len(result['tensions'])}")
            for tension in result["tensions"]:
                print(f"  - {tension['description']}")

        if result.get("recommendation"):
            print("\nRecommendation:")
            print(result["recommendation"]["content"])

        print(f"\nConfidence: {result.get('confidence', 0.0):.3f}")

    else:
        print("CONSULTATION RESULT")
        print("=" * 60)
        print(f"\nQuestion: {result.get('question')}")
        print(f"Engines consulted: {', '.join(result.get('engines_consulted', [])) or 'none'}")

        if result.get("synthesis"):
            print("\nSynthesis:")
            print(result["synthesis"]["content"])

        print(f"\nConfidence: {result.get('overall_confidence', 0.0):.3f}")

    # Display error
    if result.get("metadata", {}).get("error"):
        print("\nError:")
        print(result["metadata"]["error"])

    print("\n" + "=" * 60)


def format_engines(listing: dict):
    """Display a registry listing as a table."""
    engines = listing.get("engines", [])
    print(f"\n{len(engines)} engines registered\n")
    for engine in engines:
        tradition = engine.get("tradition") or "-"
        print(f"  {engine['id']:<20} {engine['domain']:<12} {tradition:<16} {engine.get('status', '')}")


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="CLI client for Project Symposium"
    )

    parser.add_argument(
        "--api-url",
        default=DEFAULT_API_URL,
        help=f"API base URL (default: {DEFAULT_API_URL})"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw JSON response"
    )

    subparsers = parser.add_subparsers(dest="command")

    consult_parser = subparsers.add_parser("consult", help="Consult engines on a question")
    consult_parser.add_argument("question", help="Question text")
    consult_parser.add_argument("--domain", dest="domains", action="append", help="Domain to consult (repeatable)")
    consult_parser.add_argument("--capability", dest="capabilities", action="append", help="Required capability (repeatable)")
    consult_parser.add_argument("--engine", dest="engines", action="append", help="Engine id (repeatable)")
    consult_parser.add_argument("--strategy", help="Synthesis strategy")
    consult_parser.add_argument("--timeout", type=float, help="Per-engine timeout in seconds")

    deliberate_parser = subparsers.add_parser("deliberate", help="Deliberate a dilemma across traditions")
    deliberate_parser.add_argument("dilemma", help="Dilemma text")
    deliberate_parser.add_argument("--tradition", dest="traditions", action="append", help="Tradition to include (repeatable)")

    engines_parser = subparsers.add_parser("engines", help="List registered engines")
    engines_parser.add_argument("--domain", help="Only engines in this domain")

    args = parser.parse_args(argv)

    if args.command == "consult":
        result = consult(
            args.question,
            args.api_url,
            domains=args.domains,
            capabilities=args.capabilities,
            engines=args.engines,
            strategy=args.strategy,
            timeout=args.timeout
        )
    elif args.command == "deliberate":
        result = deliberate(args.dilemma, args.api_url, traditions=args.traditions)
    elif args.command == "engines":
        result = list_engines(args.api_url, domain=args.domain)
    else:
        parser.print_help()
        sys.exit(1)

    if args.json:
        print(json.dumps(result, indent=2))
    elif args.command == "engines":
        format_engines(result)
    else:
        format_output(result)


if __name__ == "__main__":
    main()
