#--------------------------------------------------------------
# Tassonomia degli errori della pipeline di avvio.
# Qualsiasi errore durante l'inizializzazione blocca l'avvio dell'API.
#--------------------------------------------------------------


class PipelineError(Exception):
    """Errore base della pipeline di inizializzazione."""


class ConfigError(PipelineError):
    """Credenziali o directory mancanti / non valide."""


class RemoteError(PipelineError):
    """Il dataset host ha risposto con uno status diverso da 200 o la rete e' caduta."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class IntegrityError(PipelineError):
    """Archivio malformato o tentativo di Zip-Slip."""


class SchemaError(PipelineError):
    """Colonna obbligatoria mancante in una tabella sorgente."""
