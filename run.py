import os

from shirtgrid import create_app
from shirtgrid.config import DevConfig, ProdConfig

debug = os.getenv("DEBUG", "true").strip().lower() in {"1", "true", "yes", "on"}
app = create_app(DevConfig if debug else ProdConfig)

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5003"))
    app.logger.info("[BOOT] Mockups from %s, projects in %s", app.config["MOCKUPS_DIR"], app.config["DATA_DIR"])
    app.run(host=host, port=port, debug=debug)
