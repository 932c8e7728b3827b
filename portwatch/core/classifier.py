"""Process classification by name."""

from enum import Enum


class ProcessType(Enum):
    WEB_SERVER = "Web Server"
    DATABASE = "Database"
    DEVELOPMENT = "Development"
    SYSTEM = "System"
    OTHER = "Other"

    @property
    def label(self) -> str:
        return self.value


# Checked in order; the first table with a matching keyword wins.
KEYWORD_TABLES: tuple[tuple[ProcessType, tuple[str, ...]], ...] = (
    (ProcessType.WEB_SERVER, (
        "nginx", "apache", "httpd", "caddy", "traefik", "lighttpd",
    )),
    (ProcessType.DATABASE, (
        "postgres", "mysql", "mariadb", "redis", "mongo", "sqlite",
        "cockroach", "clickhouse",
    )),
    (ProcessType.DEVELOPMENT, (
        "node", "npm", "yarn", "python", "ruby", "php", "java", "go",
        "cargo", "swift", "vite", "webpack", "esbuild", "next", "nuxt", "remix",
    )),
    (ProcessType.SYSTEM, (
        "launchd", "rapportd", "sharingd", "airplay", "control", "kernel",
        "mds", "spotlight",
    )),
)


def classify(process_name: str) -> ProcessType:
    """Map a process name to its category. Unmatched names are OTHER."""
    name = (process_name or "").lower()
    for process_type, keywords in KEYWORD_TABLES:
        if any(keyword in name for keyword in keywords):
            return process_type
    return ProcessType.OTHER
