"""Agent package: imports trigger strategy registration."""

# Register strategies with the global registry on package import
import raggedy.agent.loop  # noqa: F401
import raggedy.agent.pipeline  # noqa: F401
