"""
Point d'entrée pour `python -m nim_proxy`.
"""
import os

import uvicorn


def main():
    """Fonction principale."""
    import argparse

    parser = argparse.ArgumentParser(description="NIM Proxy (OpenAI → NVIDIA NIM)")
    parser.add_argument("--host", default="0.0.0.0", help="Host (défaut: 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", 3000)),
        help="Port (défaut: $PORT ou 3000)"
    )
    parser.add_argument("--reload", action="store_true", help="Activer le reload auto")

    args = parser.parse_args()

    print(f"🚀 Démarrage de NIM Proxy sur {args.host}:{args.port}")
    print(f"   Health: http://localhost:{args.port}/health")

    uvicorn.run(
        "nim_proxy.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )


if __name__ == "__main__":
    main()
