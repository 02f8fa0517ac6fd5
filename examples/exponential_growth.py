import logging

import jax.numpy as jnp
from matplotlib import pyplot as plt

from jax_rk.integrate import InitialValueProblem


def main(step_sizes=(1.0, 0.5), t_final=4.0):
    """
    Solve y' = y, y(0) = 1 with Euler, midpoint and RK4 at two step sizes
    and plot each numerical solution against exp(t).

    Arguments:
        step_sizes - Step sizes compared in each panel (default (1.0, 0.5))
        t_final - End of the integration interval (default 4.0)
    """
    logging.basicConfig(level=logging.INFO)

    # Autonomous right-hand side, called without t
    ivp = InitialValueProblem(lambda y: y, 1.0)

    methods = ["euler", "midpoint", "rk4"]
    fig, axes = plt.subplots(1, len(methods), figsize=(12, 4), sharey=True)
    t_exact = jnp.linspace(0.0, t_final, 200)

    for ax, method in zip(axes, methods):
        ax.plot(t_exact, jnp.exp(t_exact), 'k--', label="exact")
        for h in step_sizes:
            samples = ivp.solve(method, h, t_final=t_final)
            t = [s.t for s in samples]
            y = [s.y for s in samples]
            ax.plot(t, y, '-', marker='o', label=f"$h={h}$")
            error = abs(samples[-1].y - jnp.exp(samples[-1].t))
            print(f"{method:>8s}, h={h}: y({samples[-1].t}) = {samples[-1].y:.6f}, error = {error:.3e}")
        ax.set_title(method)
        ax.set_xlabel('t')
        ax.legend()
    axes[0].set_ylabel('y')

    # Adaptive Dormand-Prince for comparison
    samples = ivp.solve("dp45", 0.5, t_final=t_final, error_threshold=1e-8)
    last = samples[-1]
    print(
        f"    dp45: {len(samples) - 1} steps, y({last.t}) = {last.y:.6f}, "
        f"accumulated error estimate = {last.accumulated_error:.3e}, "
        f"rejected attempts = {last.accumulated_attempts}"
    )

    plt.show()


if __name__ == "__main__":
    main()
