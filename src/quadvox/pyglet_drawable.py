## quadvox rendering pipeline and viewer window on top of pyglet
## Copyright (c) 2020 quadvox contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

import logging

import pyglet
import pyglet.gl as gl
import pyglet.graphics as graphics

from quadvox.config import ViewerConfig
from quadvox.drawable import Pipeline, check_attribute, check_indices
from quadvox.geom import vstr
from quadvox.visibility import classify_facing, facing_away, facing_toward
from quadvox.voxel import Voxel
from quadvox.xform import Perspective

logger = logging.getLogger(__name__)

## openGL utility functions
def vec(*args):
    return (gl.GLfloat * len(args))(*args)

## pyglet 1.5 vertex formats for each attribute
FORMATS = {
    'position': 'v3f/static',
    'normal': 'n3f/static',
    'color': 'c4f/static',
    'texcoord': 't2f/static',
}

## HTML document, instructions for user interaction
quadvox_legend="""
<font face="Verdana, Geneva, sans-serif" size="3" color="white"><b>quadvox</b></font><br>
<font face="Verdana, Geneva, sans-serif" size="1" color="white">
<b>space</b>: pause/resume rotation<br>
<b>m</b>: toggle display of this message<br>
<b>ESC</b>: exit viewer<br>
</font>
"""


class PygletPipeline(Pipeline):
    """
    ``Pipeline`` backed by pyglet vertex lists and the fixed-function
    matrix stack.

    Attribute uploads are held until the owner's indices arrive, then
    turned into one indexed vertex list.  A vertex list is always drawn
    whole, so ``draw`` only accepts the full uploaded index count.

    With ``normal_visualization`` the ``normal_point`` buffer is fed to
    the color channel in place of the vertex colors, and lighting is
    left off.
    """

    def __init__(self, normal_visualization=False):
        self.normal_visualization = normal_visualization
        self.__pending = {}
        self.__lists = {}

    def upload_attribute(self, owner, name, data, stride):
        check_attribute(name, data, stride)
        self.__pending.setdefault(owner, {})[name] = list(data)

    def upload_indices(self, owner, indices):
        attrs = self.__pending.pop(owner, {})
        if 'position' not in attrs:
            raise ValueError('indices uploaded before positions')
        count = len(attrs['position']) // 3
        check_indices(indices, count)

        data = []
        for name, fmt in FORMATS.items():
            if name == 'color' and self.normal_visualization:
                continue
            if name in attrs:
                data.append((fmt, attrs[name]))
        if self.normal_visualization and 'normal_point' in attrs:
            data.append(('c3f/static', attrs['normal_point']))

        old = self.__lists.pop(owner, None)
        if old is not None:
            old[0].delete()
        vlist = graphics.vertex_list_indexed(count, list(indices), *data)
        self.__lists[owner] = (vlist, len(indices))
        logger.debug('created vertex list: %d vertices, %d indices', count, len(indices))

    def set_projection(self, matrix):
        gl.glMatrixMode(gl.GL_PROJECTION)
        gl.glLoadMatrixf(vec(*matrix.flat()))
        gl.glMatrixMode(gl.GL_MODELVIEW)

    def set_transform(self, matrix):
        gl.glMatrixMode(gl.GL_MODELVIEW)
        gl.glLoadMatrixf(vec(*matrix.flat()))

    def draw(self, owner, count):
        entry = self.__lists.get(owner)
        if entry is None:
            raise ValueError('draw called for a drawable that was never attached')
        vlist, uploaded = entry
        if count != uploaded:
            raise ValueError('draw count {} does not match {} uploaded indices'.format(count, uploaded))
        vlist.draw(gl.GL_TRIANGLES)

    def release(self):
        for vlist, _ in self.__lists.values():
            vlist.delete()
        self.__lists.clear()
        self.__pending.clear()


class VoxelWindow(pyglet.window.Window):
    """
    Window that draws a list of drawables every frame and steps any
    voxels among them on a clock tick.
    """

    def __init__(self, config: ViewerConfig, drawables, pipeline: Pipeline):
        try:
            # Try and create a window with multisampling (antialiasing)
            glconfig = gl.Config(sample_buffers=1, samples=4,
                                 depth_size=16, double_buffer=True)
            super().__init__(width=config.width, height=config.height,
                             caption=config.caption, resizable=True,
                             config=glconfig)
        except pyglet.window.NoSuchConfigException:
            # Fall back to no multisampling for old hardware
            super().__init__(width=config.width, height=config.height,
                             caption=config.caption, resizable=True)
        self.settings = config
        self.drawables = list(drawables)
        self.pipeline = pipeline
        self.paused = False
        self.legend = True
        self.__label = pyglet.text.HTMLLabel(quadvox_legend, x=10, y=config.height - 10,
                                             width=config.width // 2, multiline=True,
                                             anchor_y='top')
        self.glSetup()
        for d in self.drawables:
            d.attach(self.pipeline)
        pyglet.clock.schedule_interval(self.tick, config.interval)

    def glSetup(self):
        gl.glClearColor(*self.settings.clear_color)
        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glEnable(gl.GL_CULL_FACE)
        gl.glEnable(gl.GL_NORMALIZE)
        if self.settings.normal_visualization:
            gl.glDisable(gl.GL_LIGHTING)
        else:
            gl.glEnable(gl.GL_LIGHTING)
            gl.glEnable(gl.GL_LIGHT0)
            gl.glEnable(gl.GL_COLOR_MATERIAL)
            gl.glColorMaterial(gl.GL_FRONT_AND_BACK, gl.GL_AMBIENT_AND_DIFFUSE)
            gl.glLightfv(gl.GL_LIGHT0, gl.GL_POSITION, vec(5, 5, 10, 0))
            gl.glLightfv(gl.GL_LIGHT0, gl.GL_DIFFUSE, vec(1, 1, 1, 1))
            gl.glLightfv(gl.GL_LIGHT0, gl.GL_AMBIENT, vec(0.2, 0.2, 0.2, 1))

    def tick(self, dt):
        if self.paused:
            return
        for d in self.drawables:
            if isinstance(d, Voxel):
                d.step()

    def on_resize(self, width, height):
        fb_width, fb_height = self.get_framebuffer_size()
        gl.glViewport(0, 0, fb_width, fb_height)
        self.__label.y = height - 10
        return pyglet.event.EVENT_HANDLED

    def on_draw(self):
        self.clear()
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        s = self.settings
        self.pipeline.set_projection(Perspective(s.fov, self.width / max(self.height, 1), s.near, s.far))
        gl.glEnable(gl.GL_DEPTH_TEST)
        for d in self.drawables:
            d.render(self.pipeline)
        if self.legend:
            self.__draw_legend()

    def __draw_legend(self):
        gl.glDisable(gl.GL_DEPTH_TEST)
        lighting = gl.glIsEnabled(gl.GL_LIGHTING)
        gl.glDisable(gl.GL_LIGHTING)
        gl.glMatrixMode(gl.GL_PROJECTION)
        gl.glLoadIdentity()
        gl.glOrtho(0, self.width, 0, self.height, -1, 1)
        gl.glMatrixMode(gl.GL_MODELVIEW)
        gl.glLoadIdentity()
        self.__label.draw()
        if lighting:
            gl.glEnable(gl.GL_LIGHTING)

    def on_key_press(self, symbol, modifiers):
        if symbol == pyglet.window.key.SPACE:
            self.paused = not self.paused
            return pyglet.event.EVENT_HANDLED
        if symbol == pyglet.window.key.M:
            self.legend = not self.legend
            return pyglet.event.EVENT_HANDLED
        return super().on_key_press(symbol, modifiers)

    def on_close(self):
        pyglet.clock.unschedule(self.tick)
        self.pipeline.release()
        super().on_close()


def run_viewer(config: ViewerConfig):
    """Open a window with one spinning voxel and run until it closes."""

    voxel = Voxel(config.side_length, config.position,
                  step_x=config.step_x, step_y=config.step_y)
    mesh = voxel.mesh()
    toward = classify_facing(facing_toward, [0, 0, 0], mesh.positions, mesh.indices, mesh.transform)
    away = classify_facing(facing_away, [0, 0, 0], mesh.positions, mesh.indices, mesh.transform)
    logger.info('voxel at %s: %d vertices face the camera, %d face away',
                vstr(voxel.position), len(toward), len(away))

    pipeline = PygletPipeline(normal_visualization=config.normal_visualization)
    VoxelWindow(config, [voxel], pipeline)
    pyglet.app.run()
