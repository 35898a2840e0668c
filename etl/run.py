import argparse
import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# --- IMPOSTAZIONI AMBIENTALI PREFECT ---
# Nessun server Prefect richiesto: il flow di avvio gira in modalita' effimera
os.environ.setdefault("PREFECT_SERVER_ALLOW_EPHEMERAL_MODE", "True")

from api.app import create_app
from etl.flows.startup_flow import startup_flow
from etl.utils import load_settings

root_path = Path(__file__).resolve().parent.parent


def main(argv=None):
    # Cerca il .env nella root del progetto, prima dei default della CLI
    load_dotenv(dotenv_path=root_path / ".env")

    ap = argparse.ArgumentParser(description="Olist Data Provider: prepara gli archivi giornalieri e li serve via HTTP.")
    ap.add_argument("--host", default=os.getenv("API_HOST", "0.0.0.0"), help="Indirizzo di bind")
    ap.add_argument("--port", type=int, default=int(os.getenv("API_PORT", "8080")), help="Porta HTTP")
    ap.add_argument("--init-only", action="store_true", help="Esegue solo la pipeline di avvio, senza server")
    args = ap.parse_args(argv)

    try:
        settings = load_settings()
        startup_flow(settings)
    except Exception as e:
        print(f"\nInizializzazione fallita: {e}", file=sys.stderr)
        sys.exit(1)

    if args.init_only:
        return

    uvicorn.run(create_app(settings.zip_base_dir), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
