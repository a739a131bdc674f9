"""Run the mock OpenAI API server using Uvicorn."""

from openai_mock.backend.server import main


if __name__ == "__main__":
    main()
