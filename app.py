"""
Gradio web interface for age group, gender and emotion prediction.

Run with: python app.py
"""

import logging
import os

import gradio as gr
import numpy as np

# Check if running in HF Spaces
IS_HF_SPACE = os.environ.get("SPACE_ID") is not None

# Import our modules (after env check)
from src.face_attributes import (  # noqa: E402
    AGE_GROUPS,
    EMOTIONS,
    Config,
    FacePredictor,
)

config = Config.from_env()
logging.basicConfig(level=config.log_level)

# Load all three models once at startup; a missing or corrupt file aborts here
predictor = FacePredictor.from_config(config)


def predict_attributes(image: np.ndarray) -> tuple[str, str]:
    """
    Predict age group, gender and emotion from an image.

    Args:
        image: Input image as numpy array

    Returns:
        Tuple of (result_text, error_text)
    """
    if image is None:
        return "Please upload an image", ""

    outcome = predictor.predict_image(image)
    if not outcome.ok:
        return "", outcome.error

    bundle = outcome.bundle
    result_text = (
        f"**Age Group:** {bundle.age.label} ({bundle.age.elapsed_ms} ms)\n\n"
        f"**Gender:** {bundle.gender.label} ({bundle.gender.elapsed_ms} ms)\n\n"
        f"**Emotion:** {bundle.emotion.label} ({bundle.emotion.elapsed_ms} ms)"
    )
    return result_text, ""


def create_demo() -> gr.Blocks:
    """Create the Gradio demo interface."""

    css = """
    .gradio-container {
        max-width: 900px !important;
    }
    .result-text {
        font-size: 1.2em;
        padding: 1em;
        background: #f7f7f7;
        border-radius: 8px;
    }
    .error-text {
        color: #d00;
    }
    """

    with gr.Blocks(css=css, title="Gender, Age and Emotion Detection") as demo:
        gr.Markdown(
            f"""
            # Gender, Age and Emotion Detection

            Choose a face image to run three on-device classifiers on it.

            **Age Groups:** {", ".join(AGE_GROUPS)}

            **Emotions:** {", ".join(EMOTIONS)}
            """
        )

        with gr.Row():
            with gr.Column(scale=1):
                image_input = gr.Image(
                    label="Choose Image",
                    type="numpy",
                    height=300
                )
                predict_btn = gr.Button("Predict", variant="primary", size="lg")

            with gr.Column(scale=1):
                result_text = gr.Markdown(elem_classes=["result-text"])
                error_text = gr.Markdown(elem_classes=["error-text"])

        predict_btn.click(
            fn=predict_attributes,
            inputs=[image_input],
            outputs=[result_text, error_text]
        )

        # Also predict on image upload
        image_input.change(
            fn=predict_attributes,
            inputs=[image_input],
            outputs=[result_text, error_text]
        )

    return demo


# Create the demo
demo = create_demo()

if __name__ == "__main__":
    demo.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=IS_HF_SPACE,
        show_error=True
    )
