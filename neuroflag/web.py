"""
neuroflag - web preview

Serves a page with the network background and the waving flag card.
The browser only schedules frames (requestAnimationFrame) and shows them;
every frame is computed here.

Run: neuroflag serve  (or python -m neuroflag.web)
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np
from flask import Flask, jsonify, render_template_string, request

from neuroflag.config import SceneConfig
from neuroflag.core.parallax import neutral_tilt
from neuroflag.core.page import Page, Scene, mount
from neuroflag.utils.image_ops import encode_png_base64

logger = logging.getLogger(__name__)

app = Flask(__name__)

DEFAULT_VIEWPORT = (1280, 720)

_lock = threading.Lock()
_config = SceneConfig()
_scene: Optional[Scene] = None


def configure(config: Optional[SceneConfig] = None) -> None:
    """Swap the scene configuration; the scene is rebuilt on the next request."""
    global _config, _scene
    with _lock:
        _config = config or SceneConfig()
        _scene = None


def _get_scene() -> Scene:
    # caller holds _lock
    global _scene
    if _scene is None:
        w, h = DEFAULT_VIEWPORT
        page = Page(w, h, element_ids={_config.flag_element_id}, class_names={_config.tilt_class})
        _scene = mount(page, _config)
        logger.info("mounted scene %dx%d (flag=%s, tilt=%s)", w, h, _scene.flag is not None, _scene.tilt is not None)
    return _scene


def _overlay_png(overlay: np.ndarray) -> str:
    rgba = np.clip(overlay * 255.0 + 0.5, 0, 255).astype(np.uint8)
    return encode_png_base64(rgba)


def _payload() -> dict:
    return request.get_json(silent=True) or {}


HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>neuroflag</title>
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: 'Helvetica Neue', Arial, sans-serif;
            background: {{ background }};
            color: #fff;
            min-height: 100vh;
            display: flex;
            align-items: center;
            justify-content: center;
            overflow: hidden;
        }
        #neural-bg {
            position: fixed;
            inset: 0;
            width: 100vw;
            height: 100vh;
            z-index: 0;
            pointer-events: none;
        }
        .{{ tilt_class }} {
            position: relative;
            z-index: 1;
            padding: 24px;
            border: 1px solid rgba(255, 255, 255, 0.2);
            border-radius: 12px;
            background: rgba(0, 0, 0, 0.6);
            transition: transform 0.1s ease-out;
        }
        .{{ tilt_class }} button {
            margin-top: 12px;
            background: transparent;
            color: #fff;
            border: 1px solid #fff;
            border-radius: 16px;
            padding: 4px 14px;
            cursor: pointer;
        }
    </style>
</head>
<body>
    <img id="neural-bg" alt="">
    <div class="{{ tilt_class }}">
        <img id="{{ flag_id }}" width="{{ flag_width }}" height="{{ flag_height }}" alt="">
        <div><button id="btnDither">dither</button> <button id="btnPlayPause">pause</button></div>
    </div>
    <script>
        const state = { playing: true, busy: false };
        const bg = document.getElementById('neural-bg');
        const flag = document.getElementById('{{ flag_id }}');
        const card = document.querySelector('.{{ tilt_class }}');

        async function post(url, body) {
            const response = await fetch(url, {
                method: 'POST',
                headers: { 'Content-Type': 'application/json' },
                body: JSON.stringify(body || {})
            });
            return response.json();
        }

        async function frame() {
            if (state.playing && !state.busy) {
                state.busy = true;
                try {
                    const net = await post('/frame/network', { width: window.innerWidth, height: window.innerHeight });
                    if (net.success) bg.src = 'data:image/png;base64,' + net.image_data;
                    const fl = await post('/frame/flag');
                    if (fl.success) flag.src = 'data:image/png;base64,' + fl.image_data;
                } catch (error) {
                    console.error('Frame error:', error);
                } finally {
                    state.busy = false;
                }
            }
            requestAnimationFrame(frame);
        }

        document.getElementById('btnDither').addEventListener('click', async () => {
            state.playing = false;
            document.getElementById('btnPlayPause').textContent = 'play';
            const result = await post('/frame/dither');
            if (result.success) flag.src = 'data:image/png;base64,' + result.image_data;
        });

        document.getElementById('btnPlayPause').addEventListener('click', (e) => {
            state.playing = !state.playing;
            e.target.textContent = state.playing ? 'pause' : 'play';
        });

        // pointer events fire faster than the round trip; only the newest answer counts
        let tiltSeq = 0;

        document.addEventListener('mousemove', async (e) => {
            const seq = ++tiltSeq;
            const result = await post('/tilt', { x: e.clientX, y: e.clientY, width: window.innerWidth, height: window.innerHeight });
            if (seq === tiltSeq && result.success && result.transform) card.style.transform = result.transform;
        });

        document.addEventListener('mouseleave', () => {
            ++tiltSeq;
            card.style.transform = '{{ neutral_transform }}';
            post('/tilt/reset');
        });

        frame();
    </script>
</body>
</html>
"""


@app.route('/')
def index():
    with _lock:
        cfg = _config
    return render_template_string(
        HTML_TEMPLATE,
        background=cfg.background,
        flag_id=cfg.flag_element_id,
        tilt_class=cfg.tilt_class,
        flag_width=cfg.flag.width,
        flag_height=cfg.flag.height,
        neutral_transform=neutral_tilt(cfg.tilt).css(),
    )


@app.route('/frame/network', methods=['POST'])
def network_frame():
    try:
        data = _payload()
        with _lock:
            scene = _get_scene()
            width = int(data.get('width', scene.page.width))
            height = int(data.get('height', scene.page.height))
            if width <= 0 or height <= 0:
                raise ValueError(f"invalid viewport {width}x{height}")
            if (width, height) != (scene.page.width, scene.page.height):
                scene.resize(width, height)
            net = scene.network
            overlay = net.render(net.tick())
            particles = net.particle_count
        return jsonify({
            'success': True,
            'image_data': _overlay_png(overlay),
            'width': width,
            'height': height,
            'particles': particles,
        })
    except Exception as e:
        logger.warning("network frame failed: %s", e)
        return jsonify({'success': False, 'error': str(e)}), 400


@app.route('/frame/flag', methods=['POST'])
def flag_frame():
    with _lock:
        scene = _get_scene()
        if scene.flag is None:
            return jsonify({'success': False, 'error': 'flag is not mounted on this page'}), 404
        pixels = scene.flag.tick()
        t = scene.flag.time
    return jsonify({'success': True, 'image_data': encode_png_base64(pixels), 'time': t})


@app.route('/frame/dither', methods=['POST'])
def dither_frame():
    try:
        data = _payload()
        with _lock:
            scene = _get_scene()
            if scene.flag is None:
                return jsonify({'success': False, 'error': 'flag is not mounted on this page'}), 404
            threshold = float(data.get('threshold', _config.dither_threshold))
            if not 0 <= threshold <= 255:
                raise ValueError(f"threshold must be in [0, 255], got {threshold}")
            pixels = scene.flag.dither(threshold)
        return jsonify({'success': True, 'image_data': encode_png_base64(pixels)})
    except Exception as e:
        logger.warning("dither failed: %s", e)
        return jsonify({'success': False, 'error': str(e)}), 400


@app.route('/tilt', methods=['POST'])
def tilt():
    try:
        data = _payload()
        with _lock:
            scene = _get_scene()
            x = float(data['x'])
            y = float(data['y'])
            width = int(data.get('width', scene.page.width))
            height = int(data.get('height', scene.page.height))
            if width <= 0 or height <= 0:
                raise ValueError(f"invalid viewport {width}x{height}")
            if (width, height) != (scene.page.width, scene.page.height):
                scene.resize(width, height)
            css = scene.pointer_move(x, y)
        return jsonify({'success': True, 'transform': css})
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)}), 400


@app.route('/tilt/reset', methods=['POST'])
def tilt_reset():
    with _lock:
        css = _get_scene().pointer_leave()
    return jsonify({'success': True, 'transform': css})


def serve(host: str = '127.0.0.1', port: int = 5000, debug: bool = False) -> None:
    logger.info("serving neuroflag preview on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    serve()
