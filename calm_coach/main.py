from calm_coach.ui.gradio_app import create_demo
from dotenv import load_dotenv, find_dotenv


def main():
    # Load env vars
    load_dotenv(find_dotenv())

    demo = create_demo()
    demo.launch(share=False)


if __name__ == "__main__":
    main()
